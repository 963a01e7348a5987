from pydantic import BaseModel, Field
from typing import Any, List, Optional
from datetime import datetime


# ✅ input (POST /students)
class StudentCreate(BaseModel):
    class_id: Optional[int] = None                  # owning class
    name: Optional[str] = None                      # full name
    age: Optional[int] = None
    avatar_url: Optional[str] = None
    performance_level: Any = None                   # validated by normalize_performance_level


# ✅ input (PUT /students/{id}); only fields actually sent are applied
class StudentUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = None
    avatar_url: Optional[str] = None
    performance_level: Any = None


# ✅ one row of POST /students/bulk
class BulkStudentInput(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = None


class BulkStudentCreate(BaseModel):
    class_id: Optional[int] = None
    students: List[BulkStudentInput] = Field(default_factory=list)


# ✅ POST /students/extract (class registry photos)
class ExtractStudentsRequest(BaseModel):
    image_urls: List[str] = Field(default_factory=list)


class ExtractedStudent(BaseModel):
    name: str
    age: Optional[int] = None


class StudentRegistryExtraction(BaseModel):
    students: List[ExtractedStudent] = Field(default_factory=list)
    raw_text: Optional[str] = None
    detected_format: Optional[str] = None


# ✅ output
class Student(BaseModel):
    id: int
    class_id: int
    name: str
    age: Optional[int] = None
    avatar_url: Optional[str] = None
    performance_level: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StudentBrief(BaseModel):
    id: int
    name: str
    age: Optional[int] = None
    avatar_url: Optional[str] = None
    performance_level: int

    class Config:
        from_attributes = True


# ✅ result of the recalculation driver (logging / API response, not control flow)
class PerformanceRecalculation(BaseModel):
    student_id: int
    level: int
    average_percent: Optional[float] = None


class PerformanceLevelBand(BaseModel):
    value: int
    label: str
    description: str
    min_percent: float


# ✅ nested rows of GET /students/{id} and GET /classes/{id}
class StudentLessonStatus(BaseModel):
    id: int
    lesson_id: int
    mastery_level: str
    notes: Optional[str] = None
    score: Optional[float] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StudentAssessmentRecord(BaseModel):
    id: int
    assessment_id: int
    detected_student_name: Optional[str] = None
    overall_score: Optional[float] = None
    max_score: Optional[float] = None
    graded_responses: Any = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
