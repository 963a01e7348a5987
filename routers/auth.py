import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from dependencies.security import CurrentTeacher
from models.teachers import Teacher as TeacherModel
from schemas.auth import LoginRequest, SignupRequest, TeacherPublic
from schemas.common import ok
from utils.security import (
    create_token, hash_password, is_valid_email, is_valid_password, verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_response(response: Response, teacher: TeacherModel) -> dict:
    """Token in the body for API clients, HttpOnly cookie for browsers."""
    token = create_token(teacher.id, teacher.email, teacher.name)
    max_age = settings.JWT_EXPIRE_HOURS * 60 * 60
    response.set_cookie(
        settings.AUTH_COOKIE_NAME, token,
        max_age=max_age, httponly=True, secure=settings.AUTH_COOKIE_SECURE, samesite="strict", path="/",
    )
    response.set_cookie(
        "teacher-id", str(teacher.id),
        max_age=max_age, secure=settings.AUTH_COOKIE_SECURE, samesite="strict", path="/",
    )
    return {
        "success": True,
        "teacher": TeacherPublic.model_validate(teacher),
        "token": token,
        "message": "Authentication successful",
    }


# ✅ [SIGNUP] create a teacher account
@router.post("/signup")
def signup(body: SignupRequest, response: Response, db: Session = Depends(get_db)):
    if not body.email or not body.password or not body.name:
        raise HTTPException(status_code=400, detail="Email, password, and name are required")
    if not is_valid_email(body.email):
        raise HTTPException(status_code=400, detail="Please provide a valid email address")
    if not is_valid_password(body.password):
        raise HTTPException(
            status_code=400, detail="Password must be at least 8 characters with letters and numbers"
        )

    if db.query(TeacherModel).filter(TeacherModel.email == body.email).first() is not None:
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    teacher = TeacherModel(email=body.email, password_hash=hash_password(body.password), name=body.name)
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    logger.info("Teacher account created: %s", teacher.id)
    return _auth_response(response, teacher)


# ✅ [LOGIN] email + password
@router.post("/login")
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if not is_valid_email(body.email):
        raise HTTPException(status_code=400, detail="Please provide a valid email address")

    teacher = db.query(TeacherModel).filter(TeacherModel.email == body.email).first()
    if teacher is None or not verify_password(body.password, teacher.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _auth_response(response, teacher)


# ✅ [LOGOUT] drop the cookies
@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    response.delete_cookie("teacher-id", path="/")
    return ok(message="Logged out")


# ✅ [ME] current teacher profile
@router.get("/me")
def me(teacher: CurrentTeacher):
    return ok(TeacherPublic.model_validate(teacher))
