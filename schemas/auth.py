from pydantic import BaseModel
from typing import Optional
from datetime import datetime


# ✅ request bodies (missing fields -> 400 from the router, not 422)
class SignupRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ✅ public teacher profile (never the password hash)
class TeacherPublic(BaseModel):
    id: int
    email: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ✅ decoded JWT payload
class TokenPayload(BaseModel):
    teacher_id: int
    email: str
    name: str
    iat: Optional[int] = None
    exp: Optional[int] = None
