from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class ProgramCreate(BaseModel):
    title: Optional[str] = None          # required, checked in the router
    description: Optional[str] = None


class LessonBrief(BaseModel):
    id: int
    title: str
    order_index: int

    class Config:
        from_attributes = True


class Program(BaseModel):
    id: int
    teacher_id: int
    title: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lessons: List[LessonBrief] = []

    class Config:
        from_attributes = True
