import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from dependencies.ownership import find_teacher_class, find_teacher_student
from dependencies.security import CurrentTeacher, get_current_teacher
from models.student_comments import StudentComment as CommentModel
from models.students import Student as StudentModel
from schemas.comments import CommentCreate, StudentComment
from schemas.common import ok
from schemas.students import (
    BulkStudentCreate, ExtractStudentsRequest, PerformanceLevelBand, Student,
    StudentAssessmentRecord, StudentCreate, StudentLessonStatus, StudentUpdate,
)
from schemas.summaries import StudentSummary
from services.llm.base import LLMClient, LLMError
from services.llm.llm_gemini import get_llm_client
from services.student_level import (
    DEFAULT_PERFORMANCE_LEVEL, STUDENT_PERFORMANCE_LEVELS,
    describe_performance_level, normalize_performance_level,
)
from services.student_performance import recalculate_student_performance_level

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["students"])


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def _get_owned_student(db: Session, teacher_id: int, student_id: int) -> StudentModel:
    student = find_teacher_student(db, teacher_id, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found or access denied")
    return student


def _student_detail(student: StudentModel) -> dict:
    data = Student.model_validate(student).model_dump()
    data["class"] = {"id": student.class_.id, "name": student.class_.name}
    data["performance_level_info"] = describe_performance_level(student.performance_level)
    data["summaries"] = [
        StudentSummary.model_validate(s).model_dump()
        for s in sorted(student.summaries, key=lambda s: (s.updated_at is not None, s.updated_at), reverse=True)
    ]
    data["comments"] = [
        StudentComment.model_validate(c).model_dump()
        for c in sorted(student.comments, key=lambda c: c.id, reverse=True)
    ]

    statuses = []
    for status in student.lesson_statuses:
        row = StudentLessonStatus.model_validate(status).model_dump()
        row["lesson"] = {
            "id": status.lesson.id,
            "title": status.lesson.title,
            "program": {"id": status.lesson.program.id, "title": status.lesson.program.title},
        }
        statuses.append(row)
    data["lesson_statuses"] = statuses

    assessments = []
    for sa in student.student_assessments:
        row = StudentAssessmentRecord.model_validate(sa).model_dump()
        row["assessment"] = {
            "id": sa.assessment.id,
            "title": sa.assessment.title,
            "lesson": {"id": sa.assessment.lesson.id, "title": sa.assessment.lesson.title},
        }
        assessments.append(row)
    data["student_assessments"] = assessments
    return data


# ==========================================================
# [1] Static routes (declared before /{student_id})
# ==========================================================

# ✅ [READ] performance level bands
@router.get("/performance-levels", dependencies=[Depends(get_current_teacher)])
def read_performance_levels():
    return ok([PerformanceLevelBand(**describe_performance_level(band["value"])) for band in STUDENT_PERFORMANCE_LEVELS])


# ✅ [CREATE] several students in one class, all or nothing
@router.post("/bulk", status_code=201)
def create_students_bulk(body: BulkStudentCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    if not body.class_id:
        raise HTTPException(status_code=400, detail="Class ID is required")
    if not body.students:
        raise HTTPException(status_code=400, detail="Students array is required and must not be empty")

    class_record = find_teacher_class(db, teacher.id, body.class_id)
    if class_record is None:
        raise HTTPException(status_code=404, detail="Class not found or access denied")

    if any(not s.name or not s.name.strip() for s in body.students):
        raise HTTPException(status_code=400, detail="All students must have a name")

    created = [
        StudentModel(class_id=class_record.id, name=s.name.strip(), age=s.age or None)
        for s in body.students
    ]
    db.add_all(created)
    db.commit()
    for student in created:
        db.refresh(student)

    logger.info("Bulk created %d students in class %s", len(created), class_record.id)
    return ok(
        [Student.model_validate(s) for s in created],
        f"Successfully created {len(created)} student{_plural(len(created))}",
    )


# ✅ [AI] read student names out of class registry photos
@router.post("/extract")
async def extract_students(
    body: ExtractStudentsRequest,
    teacher: CurrentTeacher,
    llm: LLMClient = Depends(get_llm_client),
):
    if not body.image_urls:
        raise HTTPException(status_code=400, detail="At least one image URL is required")
    if len(body.image_urls) > settings.REGISTRY_MAX_IMAGES:
        raise HTTPException(status_code=400, detail=f"Maximum {settings.REGISTRY_MAX_IMAGES} images allowed")

    logger.info("Extracting students from %d registry image(s) for teacher %s", len(body.image_urls), teacher.id)
    try:
        result = await llm.extract_students_from_registry(body.image_urls)
    except LLMError as e:
        logger.error("Student registry extraction failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e) or "Failed to extract students from registry")

    count = len(result.students)
    logger.info("Extracted %d students", count)
    return ok(result, f"Successfully extracted {count} student{_plural(count)}")


# ==========================================================
# [2] CRUD
# ==========================================================

# ✅ [CREATE] one student
@router.post("/", status_code=201)
def create_student(body: StudentCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    if not body.class_id or not body.name or not body.name.strip():
        raise HTTPException(status_code=400, detail="Class ID and student name are required")

    level = normalize_performance_level(body.performance_level)

    class_record = find_teacher_class(db, teacher.id, body.class_id)
    if class_record is None:
        raise HTTPException(status_code=404, detail="Class not found or access denied")

    student = StudentModel(
        class_id=class_record.id,
        name=body.name.strip(),
        age=body.age or None,
        avatar_url=body.avatar_url or None,
        performance_level=level if level is not None else DEFAULT_PERFORMANCE_LEVEL,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return ok(Student.model_validate(student), "Student created successfully")


# ✅ [READ] student with class, summaries, comments, lesson statuses, graded copies
@router.get("/{student_id}")
def read_student(student_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    student = _get_owned_student(db, teacher.id, student_id)
    return ok(_student_detail(student))


# ✅ [UPDATE] only the fields present in the body
@router.put("/{student_id}")
def update_student(student_id: int, body: StudentUpdate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    sent = body.model_fields_set

    name = None
    if "name" in sent:
        if body.name is None or not body.name.strip():
            raise HTTPException(status_code=400, detail="Student name cannot be empty")
        name = body.name.strip()

    level = normalize_performance_level(body.performance_level)

    student = _get_owned_student(db, teacher.id, student_id)

    changes = {}
    if name is not None:
        changes["name"] = name
    if "age" in sent:
        changes["age"] = body.age
    if "avatar_url" in sent:
        changes["avatar_url"] = body.avatar_url or None
    if level is not None:
        changes["performance_level"] = level

    if not changes:
        raise HTTPException(status_code=400, detail="Aucune donnée à mettre à jour.")

    for field, value in changes.items():
        setattr(student, field, value)
    db.commit()
    db.refresh(student)
    return ok(Student.model_validate(student), "Student updated successfully")


# ✅ [DELETE] student and everything hanging off it
@router.delete("/{student_id}")
def delete_student(student_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    student = _get_owned_student(db, teacher.id, student_id)
    db.delete(student)
    db.commit()
    logger.info("Student %s deleted by teacher %s", student_id, teacher.id)
    return ok(message="Student deleted successfully")


# ==========================================================
# [3] Comments
# ==========================================================

# ✅ [READ] newest first
@router.get("/{student_id}/comments")
def read_comments(student_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    _get_owned_student(db, teacher.id, student_id)
    records = (
        db.query(CommentModel)
        .filter(CommentModel.student_id == student_id)
        .order_by(CommentModel.created_at.desc(), CommentModel.id.desc())
        .all()
    )
    return ok([StudentComment.model_validate(r) for r in records])


# ✅ [CREATE]
@router.post("/{student_id}/comments", status_code=201)
def create_comment(student_id: int, body: CommentCreate, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    content = (body.content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment content is required")

    _get_owned_student(db, teacher.id, student_id)
    comment = CommentModel(student_id=student_id, teacher_id=teacher.id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return ok(StudentComment.model_validate(comment), "Comment added successfully")


# ==========================================================
# [4] Performance level
# ==========================================================

# ✅ [UPDATE] derive the level from the 5 most recent graded copies
@router.post("/{student_id}/performance/recalculate")
def recalculate_performance(student_id: int, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    _get_owned_student(db, teacher.id, student_id)
    result = recalculate_student_performance_level(student_id, db)
    db.commit()
    return ok(result, "Performance level recalculated")
