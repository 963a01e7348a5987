import logging

from sqlalchemy.orm import Session

from models.assessments import StudentAssessment as StudentAssessmentModel
from models.students import Student as StudentModel
from schemas.students import PerformanceRecalculation
from services.student_level import performance_level_from_percent, score_to_percent

logger = logging.getLogger(__name__)

RECENT_ASSESSMENT_COUNT = 5


def recalculate_student_performance_level(student_id: int, db: Session) -> PerformanceRecalculation:
    """
    Recompute a student's performance level from the 5 most recent assessments
    and store it, overwriting any level set by hand.

    Flushes but does not commit: the caller owns the transaction.
    Raises sqlalchemy.exc.NoResultFound when the student does not exist.
    """
    recent = (
        db.query(StudentAssessmentModel.overall_score, StudentAssessmentModel.max_score)
        .filter(StudentAssessmentModel.student_id == student_id)
        .order_by(StudentAssessmentModel.created_at.desc(), StudentAssessmentModel.id.desc())
        .limit(RECENT_ASSESSMENT_COUNT)
        .all()
    )

    percents = [
        p for p in (score_to_percent(overall, maximum) for overall, maximum in recent)
        if p is not None
    ]
    average_percent = sum(percents) / len(percents) if percents else None
    level = performance_level_from_percent(average_percent)

    student = db.query(StudentModel).filter(StudentModel.id == student_id).one()
    student.performance_level = level
    db.flush()

    logger.info(
        "Performance level recalculated: student=%s level=%s average=%s (%d/%d usable)",
        student_id, level, average_percent, len(percents), len(recent),
    )
    return PerformanceRecalculation(student_id=student_id, level=level, average_percent=average_percent)
