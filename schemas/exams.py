"""
schemas/exams.py

- Exam upload request body
- Normalized exam analysis returned by the vision LLM (one per page)
- Copy insights stored on StudentAssessment.graded_responses
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from schemas.summaries import StudentSummary


class ExamUploadRequest(BaseModel):
    lesson_id: Optional[int] = None
    image_url: Optional[str] = None
    image_urls: Optional[List[str]] = None
    image_data_url: Optional[str] = None
    image_data_urls: Optional[List[str]] = None
    class_id: Optional[int] = None          # where to create students that do not exist yet

    def image_sources(self) -> List[str]:
        """All page sources in upload order: urls first, then data urls."""
        sources: List[str] = []
        if self.image_url:
            sources.append(self.image_url)
        sources.extend(self.image_urls or [])
        if self.image_data_url:
            sources.append(self.image_data_url)
        sources.extend(self.image_data_urls or [])
        return [s for s in sources if s]


class ExamQuestionAnalysis(BaseModel):
    number: int
    question_text: str = ""
    student_answer: Optional[str] = None
    teacher_comment: Optional[str] = None
    improvement_advice: Optional[str] = None
    recommended_program_focus: Optional[str] = None
    feedback: Optional[str] = None
    skill_tags: Optional[List[str]] = None
    correct_answer: Optional[str] = None
    points_possible: Optional[float] = None
    points_awarded: Optional[float] = None


class ExamAnalysisResult(BaseModel):
    exam_title: str
    subject: Optional[str] = None
    detected_student_name: Optional[str] = None
    raw_text: Optional[str] = None
    overall_score: Optional[float] = None
    max_score: Optional[float] = None
    grade_text: Optional[str] = None
    advice_summary: List[str] = Field(default_factory=list)
    program_recommendations: List[str] = Field(default_factory=list)
    questions: List[ExamQuestionAnalysis] = Field(default_factory=list)


class ExtractedScore(BaseModel):
    total_score: float
    max_score: float


# ✅ graded_responses column, read back leniently
class CopyInsights(BaseModel):
    grade_text: Optional[str] = None
    advice_summary: List[str] = Field(default_factory=list)
    program_recommendations: List[str] = Field(default_factory=list)
    questions: List[dict] = Field(default_factory=list)


class ProcessedStudent(BaseModel):
    student_id: int
    student_name: str
    was_created: bool
    grade_text: Optional[str] = None
    assessment_id: int
    student_assessment_id: int
    performance_level: int
    average_percent: Optional[float] = None
    summaries: List[StudentSummary] = Field(default_factory=list)


class ExamUploadResult(BaseModel):
    processed_students: List[ProcessedStudent]
