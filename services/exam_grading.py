"""
services/exam_grading.py

Pure helpers of the exam upload pipeline (no DB, no network):
- grouping pages by detected student name
- merging per-page analyses of one student's copy
- reading a numeric score out of the teacher's grade text
- lesson mastery level and status notes derived from a graded copy
"""

import re
import unicodedata
from datetime import date
from typing import Any, Iterable, List, Optional

from schemas.exams import CopyInsights, ExamAnalysisResult, ExamQuestionAnalysis, ExtractedScore

FRACTION_RE = re.compile(r"(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)")
PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")


def normalize_student_name(name: str) -> str:
    """Case and accent insensitive key: "  Élodie MARTIN " -> "elodie martin"."""
    decomposed = unicodedata.normalize("NFD", name.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def extract_scores_from_grade_text(grade_text: Optional[str]) -> Optional[ExtractedScore]:
    """
    "16/20" -> 16/20, "18,5 / 20" -> 18.5/20, "75 %" -> 75/100.
    Letter grades and anything without numbers -> None.
    """
    if not grade_text:
        return None
    normalized = grade_text.replace(",", ".", 1)

    fraction = FRACTION_RE.search(normalized)
    if fraction:
        total, maximum = float(fraction.group(1)), float(fraction.group(2))
        if maximum > 0:
            return ExtractedScore(total_score=total, max_score=maximum)

    percent = PERCENT_RE.search(normalized)
    if percent:
        return ExtractedScore(total_score=float(percent.group(1)), max_score=100.0)

    return None


def score_grade_candidate(text: str) -> float:
    """Heuristic: how much a page's grade text looks like the final grade."""
    normalized = text.lower()
    score = 0.0
    if re.search(r"(?:/|\bsur\b)\s*20\b", normalized):
        score += 4
    if re.search(r"(?:/|\bsur\b)\s*\d+", normalized):
        score += 2
    if re.search(r"\d+\s*%", normalized):
        score += 1.5
    if re.search(r"\bnote\b", normalized) or re.search(r"\btotal\b", normalized):
        score += 1
    if re.search(r"[0-9]", normalized):
        score += 0.5
    return score


def pick_best_grade_text(grade_texts: Iterable[Optional[str]]) -> Optional[str]:
    cleaned = [t.strip() for t in grade_texts if t and t.strip()]
    if not cleaned:
        return None
    # max() keeps the first of equal candidates
    return max(cleaned, key=score_grade_candidate)


def _unique(items: Iterable[str]) -> List[str]:
    seen = []
    for item in items:
        item = item.strip()
        if item and item not in seen:
            seen.append(item)
    return seen


def _first(values: Iterable[Any]) -> Any:
    return next((v for v in values if v is not None and v != ""), None)


def merge_exam_analyses(analyses: List[ExamAnalysisResult]) -> ExamAnalysisResult:
    """Merge the pages of one student's copy into a single analysis."""
    if not analyses:
        raise ValueError("No analyses to merge")

    return ExamAnalysisResult(
        exam_title=analyses[0].exam_title,
        subject=_first(a.subject for a in analyses),
        detected_student_name=_first(a.detected_student_name for a in analyses),
        raw_text="\n---\n".join(a.raw_text for a in analyses if a.raw_text),
        overall_score=_first(a.overall_score for a in analyses),
        max_score=_first(a.max_score for a in analyses),
        grade_text=pick_best_grade_text(a.grade_text for a in analyses),
        advice_summary=_unique(advice for a in analyses for advice in a.advice_summary),
        program_recommendations=_unique(rec for a in analyses for rec in a.program_recommendations),
        questions=[q for a in analyses for q in a.questions],
    )


def mastery_level_from_percent(percent: Optional[float]) -> str:
    if percent is None:
        return "in_progress"
    if percent >= 0.85:
        return "mastered"
    if percent >= 0.7:
        return "completed"
    if percent >= 0.4:
        return "in_progress"
    return "not_started"


def build_status_notes(analysis: ExamAnalysisResult, today: Optional[date] = None) -> str:
    """Short lesson status note: date, detected grade, up to 5 per-question tips."""
    today = today or date.today()
    focus = []
    for q in analysis.questions:
        note = q.improvement_advice or q.teacher_comment or q.feedback
        if note:
            focus.append(f"Q{q.number}: {note}")
    focus_notes = " | ".join(focus[:5])

    parts = [f"Analyse automatisée du {today.strftime('%d/%m/%Y')}."]
    if analysis.grade_text:
        parts.append(f"Note détectée : {analysis.grade_text}.")
    parts.append(
        focus_notes
        or (analysis.advice_summary[0] if analysis.advice_summary else None)
        or "Conseils disponibles dans la fiche élève."
    )
    return " ".join(parts)


def parse_copy_insights(raw: Any) -> CopyInsights:
    """Read StudentAssessment.graded_responses back, whatever shape older rows have."""
    if not raw:
        return CopyInsights()
    if isinstance(raw, list):
        return CopyInsights(questions=[q for q in raw if isinstance(q, dict)])
    if isinstance(raw, dict):
        grade_text = raw.get("grade_text")

        def strings(key):
            value = raw.get(key)
            if not isinstance(value, list):
                return []
            return [s.strip() for s in value if isinstance(s, str) and s.strip()]

        questions = raw.get("questions")
        return CopyInsights(
            grade_text=grade_text if isinstance(grade_text, str) else None,
            advice_summary=strings("advice_summary"),
            program_recommendations=strings("program_recommendations"),
            questions=[q for q in questions if isinstance(q, dict)] if isinstance(questions, list) else [],
        )
    return CopyInsights()


def fallback_exam_analysis(lesson_title: Optional[str] = None) -> ExamAnalysisResult:
    """Canned analysis used when the vision LLM is not configured or fails."""
    return ExamAnalysisResult(
        exam_title=f"{lesson_title or 'Lesson'} Assessment (Fallback)",
        subject=lesson_title or "General",
        detected_student_name="Élève inconnu",
        grade_text="15/20",
        overall_score=15,
        max_score=20,
        raw_text="Fallback analysis used due to missing AI credentials.",
        advice_summary=[
            "Revoir les fractions équivalentes pour gagner en vitesse.",
            "Soigner la justification écrite pour les problèmes longs.",
        ],
        program_recommendations=["Fractions", "Résolution de problèmes"],
        questions=[
            ExamQuestionAnalysis(
                number=1,
                question_text="Explique le concept principal de la leçon.",
                student_answer="Student answer placeholder",
                teacher_comment="Bonne compréhension globale.",
                improvement_advice="Ajouter un exemple concret pour valider la notion.",
                recommended_program_focus="Concepts clés",
                feedback="Réponse correcte mais incomplète.",
                skill_tags=["compréhension"],
                points_possible=10,
                points_awarded=7,
            ),
            ExamQuestionAnalysis(
                number=2,
                question_text="Applique le concept à une nouvelle situation.",
                student_answer="Student attempt placeholder",
                teacher_comment="Raisonnement pertinent.",
                improvement_advice="Décrire toutes les étapes du raisonnement.",
                recommended_program_focus="Problèmes ouverts",
                feedback="Bonne intuition, détaille davantage.",
                skill_tags=["application", "problème"],
                points_possible=10,
                points_awarded=8,
            ),
        ],
    )
