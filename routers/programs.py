import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.ownership import find_teacher_program
from dependencies.security import CurrentTeacher
from models.lesson_links import LessonLink as LinkModel
from models.programs import Program as ProgramModel
from schemas.common import ok
from schemas.lessons import Lesson
from schemas.links import LessonLink, LessonLinkDetail
from schemas.programs import Program, ProgramCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/programs", tags=["programs"])


def _get_owned_program(db: Session, teacher_id: int, program_id: int) -> ProgramModel:
    program = find_teacher_program(db, teacher_id, program_id)
    if program is None:
        raise HTTPException(status_code=404, detail="Program not found or access denied")
    return program


def _program_detail(db: Session, program: ProgramModel) -> dict:
    data = Program.model_validate(program).model_dump(exclude={"lessons"})

    lessons = []
    for lesson in program.lessons:
        row = Lesson.model_validate(lesson).model_dump()
        row["from_links"] = [LessonLink.model_validate(l).model_dump() for l in lesson.from_links]
        row["to_links"] = [LessonLink.model_validate(l).model_dump() for l in lesson.to_links]
        lessons.append(row)
    data["lessons"] = lessons

    lesson_ids = [lesson.id for lesson in program.lessons]
    links = []
    if lesson_ids:
        links = (
            db.query(LinkModel)
            .filter(or_(LinkModel.from_lesson_id.in_(lesson_ids), LinkModel.to_lesson_id.in_(lesson_ids)))
            .order_by(LinkModel.id)
            .all()
        )
    data["links"] = [LessonLinkDetail.model_validate(l).model_dump() for l in links]
    return data


# ==========================================================
# [1] CRUD
# ==========================================================

# ✅ [READ] the teacher's programs, most recently updated first
@router.get("/")
def read_programs(teacher: CurrentTeacher, db: Session = Depends(get_db)):
    records = (
        db.query(ProgramModel)
        .filter(ProgramModel.teacher_id == teacher.id)
        .order_by(ProgramModel.updated_at.desc(), ProgramModel.id.desc())
        .all()
    )
    return ok([Program.model_validate(r) for r in records])


# ✅ [CREATE]
@router.post("/", status_code=201)
def create_program(body: ProgramCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    title = (body.title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Program title is required")

    program = ProgramModel(teacher_id=teacher.id, title=title, description=body.description)
    db.add(program)
    db.commit()
    db.refresh(program)
    logger.info("Program %s created by teacher %s", program.id, teacher.id)
    return ok(Program.model_validate(program), "Program created successfully")


# ✅ [READ] lessons in order, each with its links, plus every link touching the program
@router.get("/{program_id}")
def read_program(program_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    program = _get_owned_program(db, teacher.id, program_id)
    return ok(_program_detail(db, program))


# ✅ [UPDATE]
@router.put("/{program_id}")
def update_program(program_id: int, body: ProgramCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    program = _get_owned_program(db, teacher.id, program_id)

    sent = body.model_fields_set
    if "title" in sent:
        title = (body.title or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Program title cannot be empty")
        program.title = title
    if "description" in sent:
        program.description = body.description

    db.commit()
    db.refresh(program)
    return ok(Program.model_validate(program), "Program updated successfully")


# ✅ [DELETE] program and, by cascade, its lessons and their links
@router.delete("/{program_id}")
def delete_program(program_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    program = _get_owned_program(db, teacher.id, program_id)
    db.delete(program)
    db.commit()
    logger.info("Program %s deleted by teacher %s", program_id, teacher.id)
    return ok(message="Program deleted successfully")

