"""
services/exam_upload.py

Exam upload pipeline (POST /exams/upload):
  photos -> vision LLM (bounded concurrency) -> pages grouped per student
  -> per student: Assessment + StudentAssessment + lesson status
  -> performance level recalculation -> AI summaries

Known rejections are raised as ExamUploadError(status_code, message);
the router turns them into responses.
"""

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from config.settings import settings
from dependencies.ownership import find_teacher_class, find_teacher_lesson
from models.assessments import Assessment as AssessmentModel
from models.assessments import StudentAssessment as StudentAssessmentModel
from models.classes import Class as ClassModel
from models.student_lesson_statuses import StudentLessonStatus as StatusModel
from models.students import Student as StudentModel
from models.teachers import Teacher as TeacherModel
from schemas.exams import ExamAnalysisResult, ExamUploadRequest, ExtractedScore, ProcessedStudent
from schemas.summaries import StudentSummary
from services import exam_grading
from services.llm.base import LLMClient, LLMError, LLMNotConfigured
from services.student_performance import recalculate_student_performance_level
from services.summary_service import regenerate_student_summaries

logger = logging.getLogger(__name__)


class ExamUploadError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class StudentResolutionError(Exception):
    """code is one of the keys of STUDENT_RESOLUTION_MESSAGES"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)


STUDENT_RESOLUTION_MESSAGES = {
    "DETECTED_NAME_REQUIRED": "Nom manquant : vérifiez que chaque copie contient clairement le nom de l’élève.",
    "CLASS_ID_REQUIRED_FOR_CREATION": "Sélectionnez une classe pour créer automatiquement les élèves détectés.",
    "CLASS_NOT_FOUND_OR_UNAUTHORIZED": "Class not found or you do not have access to this class.",
}


# ==========================================================
# [1] Page analysis
# ==========================================================
async def _analyze_page(llm: LLMClient, source: str, lesson_title: str) -> ExamAnalysisResult:
    try:
        return await llm.analyze_exam_image(source, lesson_title)
    except LLMNotConfigured:
        logger.warning("LLM API key is not set. Returning fallback exam analysis.")
    except LLMError as e:
        logger.error("Exam page analysis failed, using fallback: %s", e)
    return exam_grading.fallback_exam_analysis(lesson_title)


async def analyze_pages(
    llm: LLMClient, sources: List[str], lesson_title: str, concurrency: int
) -> List[ExamAnalysisResult]:
    """One LLM call per page, at most `concurrency` in flight, results in page order."""
    semaphore = asyncio.Semaphore(max(1, min(concurrency, len(sources) or 1)))

    async def run(index: int, source: str) -> ExamAnalysisResult:
        async with semaphore:
            logger.info("Sending exam page %d/%d to AI...", index + 1, len(sources))
            return await _analyze_page(llm, source, lesson_title)

    return list(await asyncio.gather(*(run(i, s) for i, s in enumerate(sources))))


def group_pages_by_student(
    analyses: List[ExamAnalysisResult], sources: List[str]
) -> Tuple["OrderedDict[str, dict]", List[int]]:
    """
    Group pages by normalized detected name.
    Returns ({key: {"display_name", "analyses", "sources"}}, [1-based pages without a name]).
    """
    groups: "OrderedDict[str, dict]" = OrderedDict()
    nameless_pages: List[int] = []

    for index, (analysis, source) in enumerate(zip(analyses, sources)):
        detected = (analysis.detected_student_name or "").strip()
        if not detected:
            nameless_pages.append(index + 1)
            continue
        key = exam_grading.normalize_student_name(detected)
        group = groups.setdefault(key, {"display_name": detected, "analyses": [], "sources": []})
        group["analyses"].append(analysis)
        group["sources"].append(source)

    return groups, nameless_pages


# ==========================================================
# [2] DB helpers
# ==========================================================
def resolve_student(
    db: Session, teacher_id: int, possible_name: Optional[str], class_id: Optional[int]
) -> Tuple[StudentModel, bool]:
    """
    Existing student of this teacher whose name has the same key as the pages were
    grouped by (case and accent insensitive), else a new one in class_id.
    """
    if not possible_name or not possible_name.strip():
        raise StudentResolutionError("DETECTED_NAME_REQUIRED")
    cleaned = possible_name.strip()
    key = exam_grading.normalize_student_name(cleaned)

    # folded in Python: SQL lower() is ASCII only on some backends
    candidates = (
        db.query(StudentModel)
        .join(ClassModel, StudentModel.class_id == ClassModel.id)
        .filter(ClassModel.teacher_id == teacher_id)
        .order_by(StudentModel.id)
        .all()
    )
    matched = next((s for s in candidates if exam_grading.normalize_student_name(s.name) == key), None)
    if matched is not None:
        return matched, False

    if not class_id:
        raise StudentResolutionError("CLASS_ID_REQUIRED_FOR_CREATION")

    class_record = find_teacher_class(db, teacher_id, class_id)
    if class_record is None:
        raise StudentResolutionError("CLASS_NOT_FOUND_OR_UNAUTHORIZED")

    student = StudentModel(class_id=class_record.id, name=cleaned)
    db.add(student)
    db.flush()
    return student, True


def resolve_score(analysis: ExamAnalysisResult) -> Optional[ExtractedScore]:
    """Score written on the copy; declared numeric scores only when the grade text has none."""
    extracted = exam_grading.extract_scores_from_grade_text(analysis.grade_text)
    if extracted is not None:
        return extracted
    if analysis.overall_score is not None and analysis.max_score is not None and analysis.max_score > 0:
        return ExtractedScore(total_score=analysis.overall_score, max_score=analysis.max_score)
    return None


def upsert_student_lesson_status(
    db: Session,
    student_id: int,
    lesson_id: int,
    analysis: ExamAnalysisResult,
    score: Optional[ExtractedScore],
) -> StatusModel:
    percent = score.total_score / score.max_score if score is not None else None
    mastery_level = exam_grading.mastery_level_from_percent(percent)
    notes = exam_grading.build_status_notes(analysis)
    now = datetime.now()

    status = (
        db.query(StatusModel)
        .filter(StatusModel.student_id == student_id, StatusModel.lesson_id == lesson_id)
        .first()
    )
    if status is None:
        status = StatusModel(student_id=student_id, lesson_id=lesson_id)
        db.add(status)
    status.score = score.total_score if score is not None else None
    status.mastery_level = mastery_level
    status.notes = notes
    status.completed_at = now
    db.flush()
    return status


# ==========================================================
# [3] Pipeline
# ==========================================================
async def process_exam_upload(
    db: Session, teacher: TeacherModel, request: ExamUploadRequest, llm: LLMClient
) -> List[ProcessedStudent]:
    logger.info("Received exam upload request (teacher=%s)", teacher.id)

    if not request.lesson_id:
        logger.warning("Exam upload missing lesson_id")
        raise ExamUploadError(400, "Lesson ID is required")

    sources = request.image_sources()
    if not sources:
        logger.warning("Exam upload missing image payload")
        raise ExamUploadError(400, "Provide at least one exam photo (image_url or image_data_url)")

    lesson = find_teacher_lesson(db, teacher.id, request.lesson_id)
    if lesson is None:
        logger.warning("Lesson %s not found or unauthorized during exam upload", request.lesson_id)
        raise ExamUploadError(404, "Lesson not found or access denied")

    analyses = await analyze_pages(llm, sources, lesson.title, settings.EXAM_OCR_CONCURRENCY)
    groups, nameless_pages = group_pages_by_student(analyses, sources)

    if not groups:
        logger.warning("No student names detected on uploaded copies")
        raise ExamUploadError(
            422,
            "Aucun nom n’a été détecté sur les copies envoyées. "
            "Vérifiez que chaque page contient clairement le nom de l’élève.",
        )
    if nameless_pages:
        logger.warning("Missing names on pages: %s", nameless_pages)
        raise ExamUploadError(
            422,
            f"Impossible d'affecter certaines pages (numéros: {', '.join(map(str, nameless_pages))}). "
            "Assurez-vous que le nom figure sur chaque page.",
        )

    processed: List[ProcessedStudent] = []
    for group in groups.values():
        merged = exam_grading.merge_exam_analyses(group["analyses"])
        score = resolve_score(merged)

        logger.info("Resolving student record for %s...", group["display_name"])
        try:
            student, was_created = resolve_student(db, teacher.id, merged.detected_student_name, request.class_id)
        except StudentResolutionError as e:
            db.rollback()
            message = STUDENT_RESOLUTION_MESSAGES.get(e.code, "Unable to resolve student for this exam upload.")
            logger.warning("Unable to resolve student for exam upload: %s", message)
            raise ExamUploadError(400, f"{group['display_name']}: {message}")
        logger.info("Student resolved: %s (%s)%s", student.name, student.id, " [created]" if was_created else "")

        logger.info("Saving assessment + copy insights...")
        assessment = AssessmentModel(
            lesson_id=lesson.id,
            title=merged.exam_title or f"{lesson.title} Assessment",
            description=merged.subject,
            source_image_url=",".join(group["sources"]),
            extracted_data={
                "raw_text": merged.raw_text,
                "grade_text": merged.grade_text,
                "advice_summary": merged.advice_summary,
                "program_recommendations": merged.program_recommendations,
                "questions": [q.model_dump() for q in merged.questions],
            },
        )
        db.add(assessment)
        db.flush()

        student_assessment = StudentAssessmentModel(
            assessment_id=assessment.id,
            student_id=student.id,
            detected_student_name=merged.detected_student_name,
            overall_score=score.total_score if score else None,
            max_score=score.max_score if score else None,
            graded_responses={
                "grade_text": merged.grade_text,
                "advice_summary": merged.advice_summary,
                "program_recommendations": merged.program_recommendations,
                "questions": [q.model_dump() for q in merged.questions],
            },
        )
        db.add(student_assessment)
        db.flush()

        logger.info("Updating lesson status with detected grade...")
        upsert_student_lesson_status(db, student.id, lesson.id, merged, score)

        logger.info("Recalculating performance level...")
        recalculation = recalculate_student_performance_level(student.id, db)

        logger.info("Regenerating AI summary for student...")
        summaries = await regenerate_student_summaries(db, student.id, llm)

        db.commit()

        processed.append(ProcessedStudent(
            student_id=student.id,
            student_name=student.name,
            was_created=was_created,
            grade_text=merged.grade_text,
            assessment_id=assessment.id,
            student_assessment_id=student_assessment.id,
            performance_level=recalculation.level,
            average_percent=recalculation.average_percent,
            summaries=[StudentSummary.model_validate(s) for s in summaries],
        ))

    logger.info("Exam upload pipeline completed successfully (%d students)", len(processed))
    return processed
