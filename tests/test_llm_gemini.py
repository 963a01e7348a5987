import asyncio
import base64
import json

import httpx
import pytest

from services.llm import llm_gemini, prompts
from services.llm.base import LLMError, LLMNotConfigured
from services.llm.llm_gemini import GeminiLLMClient


def gemini_reply(payload) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]}


@pytest.fixture
def transport(monkeypatch):
    """Routes every Gemini/image request through a handler the test sets."""
    state = {"requests": [], "handler": None}

    def dispatch(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["handler"](request)

    monkeypatch.setattr(llm_gemini, "_client", lambda: httpx.AsyncClient(transport=httpx.MockTransport(dispatch)))
    return state


def test_missing_api_key():
    with pytest.raises(LLMNotConfigured):
        asyncio.run(GeminiLLMClient(api_key="").generate_student_analysis({"student": {}}))


def test_exam_analysis_with_data_url(transport):
    transport["handler"] = lambda request: httpx.Response(200, json=gemini_reply({
        "exam_title": "Dictée",
        "detected_student_name": "Léa",
        "grade_text": "16/20",
        "questions": [{"question_text": "Q", "feedback": "Attention aux accords", "points_awarded": 3}],
    }))

    result = asyncio.run(
        GeminiLLMClient(api_key="k").analyze_exam_image("data:image/png;base64,QUJD", "Orthographe")
    )

    assert result.detected_student_name == "Léa"
    assert result.questions[0].number == 1
    assert result.questions[0].improvement_advice == "Attention aux accords"

    [request] = transport["requests"]
    assert request.url.params["key"] == "k"
    body = json.loads(request.content)
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["contents"][0]["parts"][1] == {"inline_data": {"mime_type": "image/png", "data": "QUJD"}}


def test_image_urls_are_downloaded(transport):
    def handler(request):
        if request.url.host == "images.test":
            return httpx.Response(200, content=b"jpeg-bytes", headers={"content-type": "image/jpeg"})
        return httpx.Response(200, json=gemini_reply({"students": [{"name": " Alice ", "age": 9}, {"name": ""}]}))

    transport["handler"] = handler

    result = asyncio.run(GeminiLLMClient(api_key="k").extract_students_from_registry(["https://images.test/r.jpg"]))

    assert [(s.name, s.age) for s in result.students] == [("Alice", 9)]
    body = json.loads(transport["requests"][-1].content)
    assert body["contents"][0]["parts"][1]["inline_data"]["data"] == base64.b64encode(b"jpeg-bytes").decode()


def test_http_errors_become_llm_errors(transport):
    transport["handler"] = lambda request: httpx.Response(503, text="overloaded")
    with pytest.raises(LLMError):
        asyncio.run(GeminiLLMClient(api_key="k").generate_student_analysis({"student": {}}))


def test_incomplete_student_analysis_is_rejected(transport):
    transport["handler"] = lambda request: httpx.Response(200, json=gemini_reply({"strengths": []}))
    with pytest.raises(LLMError):
        asyncio.run(GeminiLLMClient(api_key="k").generate_student_analysis({"student": {}}))


def test_load_json_object_tolerates_fences():
    assert prompts.load_json_object('```json\n{"a": 1}\n```') == {"a": 1}
    with pytest.raises(LLMError):
        prompts.load_json_object("[1, 2]")
    with pytest.raises(LLMError):
        prompts.load_json_object("not json")


def test_exam_analysis_requires_questions():
    with pytest.raises(LLMError):
        prompts.parse_exam_analysis({"exam_title": "x"}, None)
