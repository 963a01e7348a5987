from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class LessonCreate(BaseModel):
    program_id: Optional[int] = None             # owning program
    title: Optional[str] = None                  # lesson title
    description: Optional[str] = None
    order_index: Optional[int] = None            # None -> appended after the last lesson
    test_data: Optional[str] = None


class LessonUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order_index: Optional[int] = None
    test_data: Optional[str] = None


class Lesson(BaseModel):
    id: int
    program_id: int
    title: str
    description: Optional[str] = None
    order_index: int
    test_data: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
