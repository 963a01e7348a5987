import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacher
from models.lesson_links import LessonLink as LinkModel
from models.lessons import Lesson as LessonModel
from schemas.common import ok
from schemas.links import LessonLinkCreate, LessonLinkDetail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/links", tags=["links"])


# ✅ [CREATE] directed link between two lessons of the teacher
@router.post("/", status_code=201)
def create_link(body: LessonLinkCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    if not body.from_lesson_id or not body.to_lesson_id:
        raise HTTPException(status_code=400, detail="Both from_lesson_id and to_lesson_id are required")
    if body.from_lesson_id == body.to_lesson_id:
        raise HTTPException(status_code=400, detail="A lesson cannot be linked to itself")

    from_lesson = db.get(LessonModel, body.from_lesson_id)
    to_lesson = db.get(LessonModel, body.to_lesson_id)
    if from_lesson is None or to_lesson is None:
        raise HTTPException(status_code=404, detail="One or both lessons not found")
    if from_lesson.program.teacher_id != teacher.id or to_lesson.program.teacher_id != teacher.id:
        raise HTTPException(status_code=403, detail="Access denied to one or more lessons")

    existing = (
        db.query(LinkModel)
        .filter(LinkModel.from_lesson_id == from_lesson.id, LinkModel.to_lesson_id == to_lesson.id)
        .first()
    )
    if existing is not None:
        raise HTTPException(status_code=409, detail="Link between these lessons already exists")

    link = LinkModel(
        from_lesson_id=from_lesson.id,
        to_lesson_id=to_lesson.id,
        relation_type=body.relation_type or "prerequisite",
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    return ok(LessonLinkDetail.model_validate(link), "Lesson link created successfully")


# ✅ [DELETE]
@router.delete("/{link_id}")
def delete_link(link_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    link = db.get(LinkModel, link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Link not found")
    if link.from_lesson.program.teacher_id != teacher.id:
        raise HTTPException(status_code=403, detail="Access denied")

    db.delete(link)
    db.commit()
    return ok(message="Lesson link deleted successfully")
