from typing import Optional

from sqlalchemy.orm import Session

from models.classes import Class as ClassModel
from models.lessons import Lesson as LessonModel
from models.programs import Program as ProgramModel
from models.students import Student as StudentModel


# ==========================================================
# Lookups scoped to one teacher
# - None means "missing" and "someone else's" alike
# ==========================================================
def find_teacher_class(db: Session, teacher_id: int, class_id: int) -> Optional[ClassModel]:
    return (
        db.query(ClassModel)
        .filter(ClassModel.id == class_id, ClassModel.teacher_id == teacher_id)
        .first()
    )


def find_teacher_student(db: Session, teacher_id: int, student_id: int) -> Optional[StudentModel]:
    return (
        db.query(StudentModel)
        .join(ClassModel, StudentModel.class_id == ClassModel.id)
        .filter(StudentModel.id == student_id, ClassModel.teacher_id == teacher_id)
        .first()
    )


def find_teacher_program(db: Session, teacher_id: int, program_id: int) -> Optional[ProgramModel]:
    return (
        db.query(ProgramModel)
        .filter(ProgramModel.id == program_id, ProgramModel.teacher_id == teacher_id)
        .first()
    )


def find_teacher_lesson(db: Session, teacher_id: int, lesson_id: int) -> Optional[LessonModel]:
    return (
        db.query(LessonModel)
        .join(ProgramModel, LessonModel.program_id == ProgramModel.id)
        .filter(LessonModel.id == lesson_id, ProgramModel.teacher_id == teacher_id)
        .first()
    )
