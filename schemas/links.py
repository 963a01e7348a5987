from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime

RelationType = Literal["prerequisite", "related", "sequence"]


class LessonLinkCreate(BaseModel):
    from_lesson_id: Optional[int] = None
    to_lesson_id: Optional[int] = None
    relation_type: Optional[RelationType] = None     # None -> "prerequisite"


class LessonRef(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class LessonLink(BaseModel):
    id: int
    from_lesson_id: int
    to_lesson_id: int
    relation_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LessonLinkDetail(LessonLink):
    from_lesson: LessonRef
    to_lesson: LessonRef
