from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CommentCreate(BaseModel):
    content: Optional[str] = None


class CommentAuthor(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class StudentComment(BaseModel):
    id: int
    student_id: int
    teacher_id: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    teacher: CommentAuthor

    class Config:
        from_attributes = True
