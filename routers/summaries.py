import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.ownership import find_teacher_student
from dependencies.security import CurrentTeacher
from schemas.common import ok
from schemas.summaries import StudentSummary, SummaryGenerateRequest
from services.summary_service import rule_based_analysis, upsert_summaries

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/summaries", tags=["summaries"])


# ✅ [CREATE/UPDATE] strengths, weaknesses and recommendations from lesson statuses
@router.post("/generate")
def generate_summaries(body: SummaryGenerateRequest, teacher: CurrentTeacher, db: Session = Depends(get_db)):
    if not body.student_id:
        raise HTTPException(status_code=400, detail="Student ID is required")

    student = find_teacher_student(db, teacher.id, body.student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found or access denied")

    rows = upsert_summaries(db, student.id, rule_based_analysis(student.lesson_statuses))
    db.commit()
    for row in rows:
        db.refresh(row)

    logger.info("Rule based summaries generated for student %s", student.id)
    return ok([StudentSummary.model_validate(r) for r in rows], "Student summaries generated successfully")
