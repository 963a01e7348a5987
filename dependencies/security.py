from typing import Optional, Annotated
from fastapi import Cookie, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from models.teachers import Teacher as TeacherModel
from utils.security import verify_token

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]
AuthCookie = Annotated[Optional[str], Cookie(alias=settings.AUTH_COOKIE_NAME)]


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_teacher(
    authorization: AuthHeader = None,
    auth_token: AuthCookie = None,
    db: Session = Depends(get_db),
) -> TeacherModel:
    """
    Resolve the logged-in teacher.
    - "Authorization: Bearer <token>" first, then the auth cookie
    - 401 when the token is missing, invalid, expired, or its teacher was deleted
    """
    token = None
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            token = value.strip()
    if token is None and auth_token:
        token = auth_token

    if not token:
        raise _unauthorized()

    payload = verify_token(token)
    if payload is None:
        raise _unauthorized()

    teacher = db.query(TeacherModel).filter(TeacherModel.id == payload.teacher_id).first()
    if teacher is None:
        raise _unauthorized()
    return teacher


CurrentTeacher = Annotated[TeacherModel, Depends(get_current_teacher)]
