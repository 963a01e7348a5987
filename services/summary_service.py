import json
import logging
from typing import List

from sqlalchemy.orm import Session

from models.students import Student as StudentModel
from models.student_lesson_statuses import StudentLessonStatus as StatusModel
from models.student_summaries import StudentSummary as SummaryModel
from schemas.summaries import StudentAnalysis
from services.exam_grading import parse_copy_insights
from services.llm.base import LLMClient, LLMError, LLMNotConfigured

logger = logging.getLogger(__name__)

RECENT_ASSESSMENTS_FOR_SUMMARY = 5


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


# ==========================================================
# [1] Rule based summaries (POST /summaries/generate)
# ==========================================================
def generate_strength_summary(statuses: List[StatusModel]) -> List[str]:
    completed = [s for s in statuses if s.mastery_level in ("completed", "mastered")]
    if not completed:
        return [
            "Shows willingness to engage with new material",
            "Demonstrates potential for growth",
            "Has a positive attitude towards learning",
        ]

    strengths = [
        f"Successfully completed {len(completed)} lesson{_plural(len(completed))}",
        "Shows consistent progress in understanding core concepts",
        "Demonstrates good retention of learned material",
    ]
    mastered = [s for s in completed if s.mastery_level == "mastered"]
    if mastered:
        strengths.append(f"Achieved mastery level in {len(mastered)} area{_plural(len(mastered))}")
    return strengths


def generate_weakness_summary(statuses: List[StatusModel]) -> List[str]:
    struggling = [s for s in statuses if s.mastery_level == "not_started" or (s.score and s.score < 70)]
    if not struggling:
        return [
            "No significant areas of concern identified",
            "May benefit from more challenging material",
            "Consider advanced topics to maintain engagement",
        ]
    return [
        f"Needs additional support in {len(struggling)} lesson area{_plural(len(struggling))}",
        "May benefit from alternative learning approaches",
        "Consider breaking down complex concepts into smaller steps",
        "Additional practice time may help solidify understanding",
    ]


def generate_recommendations(statuses: List[StatusModel]) -> List[str]:
    in_progress = [s for s in statuses if s.mastery_level == "in_progress"]
    not_started = [s for s in statuses if s.mastery_level == "not_started"]

    recommendations = []
    if not_started:
        recommendations += [
            f"Focus on starting {min(len(not_started), 3)} pending lesson{_plural(len(not_started))}",
            "Establish a consistent study schedule",
        ]
    if in_progress:
        recommendations += [
            "Continue current lesson progress with regular check-ins",
            "Use varied teaching methods to reinforce learning",
        ]
    recommendations += [
        "Provide regular positive feedback to maintain motivation",
        "Consider peer learning opportunities",
        "Track progress with visual learning tools",
    ]
    return recommendations[:5]


def rule_based_analysis(statuses: List[StatusModel]) -> StudentAnalysis:
    return StudentAnalysis(
        strengths=generate_strength_summary(statuses),
        weaknesses=generate_weakness_summary(statuses),
        recommendations=generate_recommendations(statuses),
    )


# ==========================================================
# [2] Fallback when the LLM is unavailable
# ==========================================================
def fallback_student_analysis(statuses: List[StatusModel]) -> StudentAnalysis:
    completed = [s for s in statuses if s.mastery_level in ("completed", "mastered")]
    in_progress = [s for s in statuses if s.mastery_level == "in_progress"]
    not_started = [s for s in statuses if s.mastery_level == "not_started"]

    strengths, weaknesses, recommendations = [], [], []

    if completed:
        strengths += [
            f"Has completed {len(completed)} lesson{_plural(len(completed))} so far.",
            "Shows ability to follow through on assigned learning tasks.",
        ]
    else:
        strengths.append("Shows potential for growth with structured support.")

    if not_started:
        weaknesses += [
            f"Several lessons ({len(not_started)}) have not been started yet.",
            "May need help getting started and clear expectations for upcoming work.",
        ]

    if in_progress:
        recommendations += [
            f"Focus upcoming sessions on {min(len(in_progress), 3)} in-progress lesson{_plural(len(in_progress))}.",
            "Schedule short, frequent check-ins to monitor understanding.",
            "Use visual supports and worked examples to reinforce key concepts.",
        ]
    else:
        recommendations += [
            "Assign one or two priority lessons and set a clear completion target.",
            "Celebrate small wins to build motivation and confidence.",
        ]

    return StudentAnalysis(strengths=strengths, weaknesses=weaknesses, recommendations=recommendations)


# ==========================================================
# [3] LLM input + upsert
# ==========================================================
def build_student_analysis_input(student: StudentModel) -> dict:
    """Everything the LLM sees about a student: lesson statuses and the 5 latest graded copies."""
    scored = [s.score for s in student.lesson_statuses if s.score is not None]
    overall_average = round(sum(scored) / len(scored)) if scored else None

    lessons = [
        {
            "lesson_title": s.lesson.title if s.lesson else "Lesson",
            "mastery_level": s.mastery_level,
            "score": s.score,
            "notes": s.notes,
            "updated_at": s.updated_at.isoformat() if s.updated_at else None,
        }
        for s in student.lesson_statuses
    ]

    assessments = []
    for sa in student.student_assessments[:RECENT_ASSESSMENTS_FOR_SUMMARY]:
        insights = parse_copy_insights(sa.graded_responses)
        assessments.append({
            "exam_title": sa.assessment.title if sa.assessment else "Assessment",
            "lesson_title": sa.assessment.lesson.title if sa.assessment and sa.assessment.lesson else None,
            "overall_score": sa.overall_score,
            "max_score": sa.max_score,
            "grade_text": insights.grade_text,
            "advice_summary": insights.advice_summary,
            "program_recommendations": insights.program_recommendations,
            "questions": [
                {
                    "number": q.get("number", index + 1),
                    "question_text": q.get("question_text") or f"Question {index + 1}",
                    "student_answer": q.get("student_answer"),
                    "teacher_comment": q.get("teacher_comment"),
                    "improvement_advice": q.get("improvement_advice"),
                    "recommended_program_focus": q.get("recommended_program_focus"),
                    "feedback": q.get("feedback"),
                    "skill_tags": q.get("skill_tags"),
                }
                for index, q in enumerate(insights.questions)
            ],
        })

    return {
        "student": {
            "id": student.id,
            "name": student.name,
            "age": student.age,
            "class_name": student.class_.name if student.class_ else None,
            "performance_level": student.performance_level,
            "overall_average_score": overall_average,
        },
        "lecons": lessons,
        "recent_assessments": assessments,
    }


def upsert_summaries(db: Session, student_id: int, analysis: StudentAnalysis) -> List[SummaryModel]:
    """One row per subject (strengths/weaknesses/recommendations), created or overwritten. Flushes only."""
    rows = []
    for subject, bullet_points in (
        ("strengths", analysis.strengths),
        ("weaknesses", analysis.weaknesses),
        ("recommendations", analysis.recommendations),
    ):
        row = (
            db.query(SummaryModel)
            .filter(SummaryModel.student_id == student_id, SummaryModel.subject == subject)
            .first()
        )
        payload = json.dumps(bullet_points, ensure_ascii=False)
        if row is None:
            row = SummaryModel(student_id=student_id, subject=subject, bullet_points_json=payload)
            db.add(row)
        else:
            row.bullet_points_json = payload
        rows.append(row)
    db.flush()
    return rows


async def regenerate_student_summaries(db: Session, student_id: int, llm: LLMClient) -> List[SummaryModel]:
    """LLM analysis of the student's graded copies, canned fallback when the LLM fails."""
    student = db.query(StudentModel).filter(StudentModel.id == student_id).one()
    # collections may predate rows flushed earlier in this unit of work
    db.expire(student)

    try:
        analysis = await llm.generate_student_analysis(build_student_analysis_input(student))
    except LLMNotConfigured:
        logger.warning("LLM API key is not set. Falling back to default summaries.")
        analysis = fallback_student_analysis(student.lesson_statuses)
    except LLMError as e:
        logger.error("Student analysis LLM call failed, falling back: %s", e)
        analysis = fallback_student_analysis(student.lesson_statuses)

    return upsert_summaries(db, student_id, analysis)
