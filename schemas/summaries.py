import json

from pydantic import BaseModel, Field, computed_field
from typing import List, Optional
from datetime import datetime


class SummaryGenerateRequest(BaseModel):
    student_id: Optional[int] = None


# ✅ shape of the JSON the LLM must return for a student
class StudentAnalysis(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class StudentSummary(BaseModel):
    id: int
    student_id: int
    subject: str
    bullet_points_json: str
    generated_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def bullet_points(self) -> List[str]:
        try:
            value = json.loads(self.bullet_points_json)
        except ValueError:
            return []
        return [str(v) for v in value] if isinstance(value, list) else []

    class Config:
        from_attributes = True
