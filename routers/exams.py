import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import CurrentTeacher
from schemas.common import ErrorResponse, ok
from schemas.exams import ExamUploadRequest, ExamUploadResult
from services.exam_upload import ExamUploadError, process_exam_upload
from services.llm.base import LLMClient
from services.llm.llm_gemini import get_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exams", tags=["exams"])


# ✅ [AI] graded copies -> assessments, lesson statuses, performance level, summaries
@router.post("/upload", status_code=201)
async def upload_exam(
    body: ExamUploadRequest,
    teacher: CurrentTeacher,
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
):
    try:
        processed = await process_exam_upload(db, teacher, body, llm)
    except ExamUploadError as e:
        db.rollback()
        return JSONResponse(status_code=e.status_code, content=ErrorResponse(message=e.message).model_dump(exclude_none=True))
    except Exception as e:
        db.rollback()
        logger.exception("Exam upload pipeline failed")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message=f"Failed to process exam upload: {e}", code="EXAM_UPLOAD_FAILED").model_dump(),
        )

    count = len(processed)
    return ok(
        ExamUploadResult(processed_students=processed),
        f"Processed {count} student cop{'ies' if count > 1 else 'y'}",
    )
