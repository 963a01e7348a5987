import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.ownership import find_teacher_lesson, find_teacher_program
from dependencies.security import CurrentTeacher
from models.lessons import Lesson as LessonModel
from schemas.common import ok
from schemas.lessons import Lesson, LessonCreate, LessonUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lessons", tags=["lessons"])


def next_order_index(db: Session, program_id: int) -> int:
    """Position after the last lesson of the program (0 for an empty program)."""
    last = (
        db.query(LessonModel.order_index)
        .filter(LessonModel.program_id == program_id)
        .order_by(LessonModel.order_index.desc())
        .first()
    )
    return last[0] + 1 if last is not None else 0


def _get_owned_lesson(db: Session, teacher_id: int, lesson_id: int) -> LessonModel:
    lesson = find_teacher_lesson(db, teacher_id, lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found or access denied")
    return lesson


# ✅ [CREATE] lesson appended to the program unless order_index is given
@router.post("/", status_code=201)
def create_lesson(body: LessonCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    title = (body.title or "").strip()
    if not body.program_id or not title:
        raise HTTPException(status_code=400, detail="Program ID and lesson title are required")

    program = find_teacher_program(db, teacher.id, body.program_id)
    if program is None:
        raise HTTPException(status_code=404, detail="Program not found or access denied")

    order_index = body.order_index if body.order_index is not None else next_order_index(db, program.id)
    lesson = LessonModel(
        program_id=program.id,
        title=title,
        description=body.description,
        order_index=order_index,
        test_data=body.test_data,
    )
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return ok(Lesson.model_validate(lesson), "Lesson created successfully")


# ✅ [UPDATE] only the fields present in the body
@router.put("/{lesson_id}")
def update_lesson(lesson_id: int, body: LessonUpdate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    lesson = _get_owned_lesson(db, teacher.id, lesson_id)

    changes = body.model_dump(exclude_unset=True)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Lesson title cannot be empty")
        changes["title"] = title
    if "order_index" in changes and changes["order_index"] is None:
        del changes["order_index"]

    for field, value in changes.items():
        setattr(lesson, field, value)
    db.commit()
    db.refresh(lesson)
    return ok(Lesson.model_validate(lesson), "Lesson updated successfully")


# ✅ [DELETE] lesson with its links, statuses and assessments
@router.delete("/{lesson_id}")
def delete_lesson(lesson_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    lesson = _get_owned_lesson(db, teacher.id, lesson_id)
    db.delete(lesson)
    db.commit()
    logger.info("Lesson %s deleted by teacher %s", lesson_id, teacher.id)
    return ok(message="Lesson deleted successfully")
