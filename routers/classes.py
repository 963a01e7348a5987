import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.ownership import find_teacher_class
from dependencies.security import CurrentTeacher
from models.classes import Class as ClassModel
from models.students import Student as StudentModel
from schemas.classes import Class, ClassCreate
from schemas.common import ok
from schemas.students import StudentBrief, StudentLessonStatus
from schemas.summaries import StudentSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["classes"])


def _student_overview(student: StudentModel) -> dict:
    data = StudentBrief.model_validate(student).model_dump()
    data["summaries"] = [StudentSummary.model_validate(s).model_dump() for s in student.summaries]
    data["lesson_statuses"] = [StudentLessonStatus.model_validate(s).model_dump() for s in student.lesson_statuses]
    return data


def _get_owned_class(db: Session, teacher_id: int, class_id: int) -> ClassModel:
    record = find_teacher_class(db, teacher_id, class_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Class not found or access denied")
    return record


# ==========================================================
# [1] CRUD
# ==========================================================

# ✅ [READ] the teacher's classes, most recently updated first
@router.get("/")
def read_classes(teacher: CurrentTeacher, db: Session = Depends(get_db)):
    records = (
        db.query(ClassModel)
        .filter(ClassModel.teacher_id == teacher.id)
        .order_by(ClassModel.updated_at.desc(), ClassModel.id.desc())
        .all()
    )
    return ok([Class.model_validate(r) for r in records])


# ✅ [CREATE] new class
@router.post("/", status_code=201)
def create_class(body: ClassCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    name = (body.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Class name is required")

    db_class = ClassModel(teacher_id=teacher.id, name=name)
    db.add(db_class)
    db.commit()
    db.refresh(db_class)
    logger.info("Class %s created by teacher %s", db_class.id, teacher.id)
    return ok(Class.model_validate(db_class), "Class created successfully")


# ✅ [READ] one class with its students, their summaries and lesson statuses
@router.get("/{class_id}")
def read_class(class_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    record = _get_owned_class(db, teacher.id, class_id)
    data = Class.model_validate(record).model_dump()
    data["students"] = [_student_overview(s) for s in sorted(record.students, key=lambda s: s.name.lower())]
    return ok(data)


# ✅ [UPDATE] rename
@router.put("/{class_id}")
def update_class(class_id: int, body: ClassCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    record = _get_owned_class(db, teacher.id, class_id)
    name = (body.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Class name is required")

    record.name = name
    db.commit()
    db.refresh(record)
    return ok(Class.model_validate(record), "Class updated successfully")


# ✅ [DELETE] class and, by cascade, its students
@router.delete("/{class_id}")
def delete_class(class_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    record = _get_owned_class(db, teacher.id, class_id)
    db.delete(record)
    db.commit()
    logger.info("Class %s deleted by teacher %s", class_id, teacher.id)
    return ok(message="Class deleted successfully")
