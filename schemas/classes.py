from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from schemas.students import StudentBrief


# ✅ create / update request body
# -> id and teacher_id come from the DB and the auth token
class ClassCreate(BaseModel):
    name: Optional[str] = None           # class name (required, checked in the router)


# ✅ response / read schema
class Class(BaseModel):
    id: int                              # class id (PK)
    teacher_id: int                      # owning teacher (FK)
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    students: List[StudentBrief] = []

    class Config:
        from_attributes = True
