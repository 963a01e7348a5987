import asyncio
import os

# configuration is read at import time
os.environ["SQLALCHEMY_DATABASE_URL"] = "sqlite://"
os.environ["AUTH_COOKIE_SECURE"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["GEMINI_API_KEY"] = ""

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from database.db import Base, SessionLocal, engine
from main import app
from schemas.exams import ExamAnalysisResult, ExamQuestionAnalysis
from schemas.students import ExtractedStudent, StudentRegistryExtraction
from schemas.summaries import StudentAnalysis
from services.llm.base import LLMClient
from services.llm.llm_gemini import get_llm_client


class FakeLLMClient(LLMClient):
    """Canned answers keyed by image source; records every call."""

    def __init__(self):
        self.exam_results: Dict[str, ExamAnalysisResult] = {}
        self.student_analysis = StudentAnalysis(
            strengths=["Bonne maîtrise des fractions"],
            weaknesses=["Justifications trop courtes"],
            recommendations=["Travailler la rédaction"],
        )
        self.registry = StudentRegistryExtraction(
            students=[ExtractedStudent(name="Alice Martin", age=9), ExtractedStudent(name="Bob Durand")],
            detected_format="table",
        )
        self.exam_error: Optional[Exception] = None
        self.student_analysis_error: Optional[Exception] = None
        self.exam_calls: List[str] = []
        self.analysis_inputs: List[dict] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def analyze_exam_image(self, image_url: str, lesson_title: Optional[str] = None) -> ExamAnalysisResult:
        self.exam_calls.append(image_url)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            # let the other pages start while this one is "in flight"
            await asyncio.sleep(0)
            if self.exam_error is not None:
                raise self.exam_error
            return self.exam_results[image_url]
        finally:
            self.in_flight -= 1

    async def generate_student_analysis(self, student: dict) -> StudentAnalysis:
        self.analysis_inputs.append(student)
        if self.student_analysis_error is not None:
            raise self.student_analysis_error
        return self.student_analysis

    async def extract_students_from_registry(self, image_urls: List[str]) -> StudentRegistryExtraction:
        return self.registry


def exam_page(name: Optional[str], grade_text: Optional[str] = "16/20", **kwargs) -> ExamAnalysisResult:
    kwargs.setdefault("questions", [
        ExamQuestionAnalysis(number=1, question_text="2 + 2 ?", improvement_advice="Vérifier les retenues."),
    ])
    return ExamAnalysisResult(
        exam_title=kwargs.pop("exam_title", "Contrôle fractions"),
        detected_student_name=name,
        grade_text=grade_text,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_llm():
    llm = FakeLLMClient()
    app.dependency_overrides[get_llm_client] = lambda: llm
    yield llm
    app.dependency_overrides.pop(get_llm_client, None)


@pytest.fixture
def client(fake_llm):
    return TestClient(app)


def signup(client: TestClient, email: str = "prof@example.com", name: str = "Prof Test") -> Dict[str, str]:
    r = client.post("/v1/auth/signup", json={"email": email, "password": "password123", "name": name})
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return signup(client)


@pytest.fixture
def other_headers(client):
    return signup(client, email="other@example.com", name="Other Teacher")


@pytest.fixture
def class_id(client, auth_headers):
    r = client.post("/v1/classes/", json={"name": "CM1 A"}, headers=auth_headers)
    return r.json()["data"]["id"]


@pytest.fixture
def lesson_id(client, auth_headers):
    program = client.post("/v1/programs/", json={"title": "Mathématiques"}, headers=auth_headers).json()["data"]
    r = client.post("/v1/lessons/", json={"program_id": program["id"], "title": "Fractions"}, headers=auth_headers)
    return r.json()["data"]["id"]
