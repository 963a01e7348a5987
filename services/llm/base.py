from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from schemas.exams import ExamAnalysisResult
from schemas.students import StudentRegistryExtraction
from schemas.summaries import StudentAnalysis


class LLMError(Exception):
    """LLM call failed (HTTP error, timeout, unparsable JSON)."""


class LLMNotConfigured(LLMError):
    """No API key configured; callers fall back to canned output."""


class LLMClient(ABC):
    @abstractmethod
    async def analyze_exam_image(self, image_url: str, lesson_title: Optional[str] = None) -> ExamAnalysisResult: ...
    @abstractmethod
    async def generate_student_analysis(self, student: Dict[str, Any]) -> StudentAnalysis: ...
    @abstractmethod
    async def extract_students_from_registry(self, image_urls: List[str]) -> StudentRegistryExtraction: ...
