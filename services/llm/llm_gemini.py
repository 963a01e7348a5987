import base64
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from config.settings import settings
from schemas.exams import ExamAnalysisResult
from schemas.students import StudentRegistryExtraction
from schemas.summaries import StudentAnalysis
from services.llm.base import LLMClient, LLMError, LLMNotConfigured
from services.llm import prompts

logger = logging.getLogger(__name__)


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.LLM_TIMEOUT, connect=10.0))


def _parse_data_url(data_url: str) -> Tuple[str, str]:
    """data:image/png;base64,AAAA -> ("image/png", "AAAA")"""
    header, _, data = data_url.partition(",")
    if not data or ";base64" not in header:
        raise LLMError("Unsupported data URL (base64 payload expected)")
    mime_type = header[len("data:"):].split(";", 1)[0] or "image/jpeg"
    return mime_type, data


class GeminiLLMClient(LLMClient):
    """Gemini generateContent over plain HTTP (JSON mode)."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.base_url = settings.GEMINI_API_BASE_URL.rstrip("/")

    # ==========================================================
    # [Common call with debug log]
    # ==========================================================
    async def _generate_json(self, model: str, system_prompt: str, parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not self.api_key:
            raise LLMNotConfigured("GEMINI_API_KEY is not set")

        url = f"{self.base_url}/models/{model}:generateContent"
        body = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": settings.LLM_TEMPERATURE,
                "maxOutputTokens": settings.LLM_MAX_TOKENS,
                "responseMimeType": "application/json",
            },
        }

        async with _client() as client:
            try:
                r = await client.post(url, params={"key": self.api_key}, json=body)
                r.raise_for_status()
                data = r.json()
            except httpx.TimeoutException as e:
                raise LLMError("Gemini request timed out") from e
            except httpx.HTTPStatusError as e:
                raise LLMError(f"Gemini error (HTTP {e.response.status_code}): {e.response.text[:500]}") from e
            except (httpx.HTTPError, ValueError) as e:
                raise LLMError(f"Gemini request failed: {e}") from e

        logger.debug("===== GEMINI RAW RESPONSE =====")
        logger.debug(json.dumps(data, ensure_ascii=False)[:4000])

        try:
            candidate_parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError("Gemini response has no candidate content") from e
        text = "\n".join(p.get("text", "") for p in candidate_parts if isinstance(p, dict))
        return prompts.load_json_object(text)

    async def _image_part(self, source: str) -> Dict[str, Any]:
        if source.startswith("data:"):
            mime_type, data = _parse_data_url(source)
        else:
            async with _client() as client:
                try:
                    r = await client.get(source, follow_redirects=True)
                    r.raise_for_status()
                except httpx.HTTPError as e:
                    raise LLMError(f"Could not download image {source}: {e}") from e
            mime_type = r.headers.get("content-type", "image/jpeg").split(";", 1)[0]
            data = base64.b64encode(r.content).decode("ascii")
        return {"inline_data": {"mime_type": mime_type, "data": data}}

    # ==========================================================
    # [LLMClient]
    # ==========================================================
    async def analyze_exam_image(self, image_url: str, lesson_title: Optional[str] = None) -> ExamAnalysisResult:
        parts = [
            {"text": prompts.exam_analysis_user_prompt(lesson_title)},
            await self._image_part(image_url),
        ]
        parsed = await self._generate_json(settings.GEMINI_VISION_MODEL, prompts.EXAM_ANALYSIS_INSTRUCTIONS, parts)
        return prompts.parse_exam_analysis(parsed, lesson_title)

    async def generate_student_analysis(self, student: Dict[str, Any]) -> StudentAnalysis:
        parts = [{"text": prompts.student_analysis_user_prompt(student)}]
        parsed = await self._generate_json(settings.GEMINI_MODEL, prompts.STUDENT_ANALYSIS_INSTRUCTIONS, parts)
        return prompts.parse_student_analysis(parsed)

    async def extract_students_from_registry(self, image_urls: List[str]) -> StudentRegistryExtraction:
        parts: List[Dict[str, Any]] = [{"text": "Extrais la liste des élèves de ces pages."}]
        for url in image_urls:
            parts.append(await self._image_part(url))
        parsed = await self._generate_json(settings.GEMINI_VISION_MODEL, prompts.REGISTRY_INSTRUCTIONS, parts)
        return prompts.parse_registry_extraction(parsed)


def get_llm_client() -> LLMClient:
    """FastAPI dependency; tests override it with a fake client."""
    return GeminiLLMClient()
