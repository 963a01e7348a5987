"""
services/llm/prompts.py

Prompts sent to the LLM and the parsers turning its JSON answers into schemas.
Vendor independent: llm_gemini.py only moves bytes.
"""

import json
from typing import Any, Dict, List, Optional

from schemas.exams import ExamAnalysisResult, ExamQuestionAnalysis
from schemas.students import ExtractedStudent, StudentRegistryExtraction
from schemas.summaries import StudentAnalysis
from services.llm.base import LLMError


# ==========================================================
# [Exam copy grading] vision
# ==========================================================
EXAM_ANALYSIS_INSTRUCTIONS = (
    "You are an expert educator reading graded exam copies. Each photo already contains the student name "
    "and the grade written by the teacher. "
    "Transcribe the student name EXACTLY as written (keep accents, uppercase, hyphens). "
    'Transcribe the grade text EXACTLY as written ("16/20", "B+", "18,5 sur 20", etc.). Never invent or recompute a grade. '
    'Only if the grade text clearly contains numbers, set "overall_score" and "max_score" accordingly; otherwise set them to null. '
    "Extract the teacher comments, the student answers, and generate actionable improvement advice referencing "
    "concrete skills or sections of the program. "
    "Output a SINGLE JSON object with the following shape:\n"
    "{\n"
    '  "detected_student_name": string,\n'
    '  "exam_title": string,\n'
    '  "subject": string,\n'
    '  "grade_text": string,\n'
    '  "overall_score": number | null,\n'
    '  "max_score": number | null,\n'
    '  "raw_text": string,\n'
    '  "advice_summary": string[],\n'
    '  "program_recommendations": string[],\n'
    '  "questions": [\n'
    "    {\n"
    '      "number": number,\n'
    '      "question_text": string,\n'
    '      "student_answer": string,\n'
    '      "teacher_comment": string,\n'
    '      "improvement_advice": string,\n'
    '      "recommended_program_focus": string,\n'
    '      "skill_tags": string[],\n'
    '      "feedback": string,\n'
    '      "correct_answer": string,\n'
    '      "points_possible": number,\n'
    '      "points_awarded": number\n'
    "    }\n"
    "  ]\n"
    "}\n"
    "Return ONLY the JSON object. If information is missing, leave the corresponding fields null or empty arrays "
    "and explain uncertainties inside the feedback."
)


def exam_analysis_user_prompt(lesson_title: Optional[str]) -> str:
    return (
        f"Lesson context: {lesson_title or 'Unknown lesson'}.\n"
        "Analyse la copie et renvoie uniquement le JSON demandé."
    )


# ==========================================================
# [Student analysis] text
# ==========================================================
STUDENT_ANALYSIS_INSTRUCTIONS = (
    "Tu es un coach pédagogique francophone. Tu analyses EXCLUSIVEMENT les copies corrigées des élèves "
    "(questions, réponses, commentaires du professeur, conseils, sections du programme à revoir) pour déterminer "
    "leurs forces, faiblesses et recommandations actionnables. "
    "Tu ignores tout signal qui ne vient pas d'une évaluation et tu ne fais aucun calcul de notes supplémentaire "
    "(la note affichée sur la copie est la seule référence). "
    'Ta réponse DOIT être un seul objet JSON avec exactement les clés "strengths", "weaknesses", "recommendations". '
    "Chaque clé contient un tableau de puces rédigées en français clair, directement liées aux erreurs ou réussites "
    "observées dans les copies. "
    "Les recommandations mentionnent explicitement les leçons ou composantes du programme à retravailler quand "
    "l'information est disponible."
)


def student_analysis_user_prompt(student_input: Dict[str, Any]) -> str:
    return (
        "Analyse ces données (leçons + copies corrigées). Déduis uniquement des enseignements issus des copies : "
        "cite les compétences maîtrisées, les erreurs récurrentes, et propose des recommandations concrètes pour "
        "la prochaine séance. Réponds en français, format JSON strict.\n\n"
        + json.dumps(student_input, ensure_ascii=False, default=str)
    )


# ==========================================================
# [Class registry] vision
# ==========================================================
REGISTRY_INSTRUCTIONS = (
    "You read photos of a class registry (list of pupils). Extract every pupil listed. "
    "Keep names exactly as written. Output a SINGLE JSON object: "
    '{"students": [{"name": string, "age": number | null}], "raw_text": string, "detected_format": string}. '
    "Return ONLY the JSON object."
)


# ==========================================================
# [Parsers]
# ==========================================================
def load_json_object(content: str) -> Dict[str, Any]:
    text = (content or "").strip()
    # tolerate ```json fences
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        parsed = json.loads(text or "{}")
    except json.JSONDecodeError as e:
        raise LLMError(f"LLM returned invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMError("LLM returned JSON that is not an object")
    return parsed


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def parse_exam_analysis(parsed: Dict[str, Any], lesson_title: Optional[str]) -> ExamAnalysisResult:
    questions = parsed.get("questions")
    if not isinstance(questions, list):
        raise LLMError("Missing questions array in exam analysis response")

    normalized = []
    for index, raw in enumerate(questions):
        q = raw if isinstance(raw, dict) else {}
        number = q.get("number")
        feedback = _text(q.get("feedback"))
        normalized.append(ExamQuestionAnalysis(
            number=number if isinstance(number, int) and not isinstance(number, bool) else index + 1,
            question_text=_text(q.get("question_text")) or "",
            student_answer=_text(q.get("student_answer")),
            teacher_comment=_text(q.get("teacher_comment")) or feedback,
            improvement_advice=_text(q.get("improvement_advice")) or feedback,
            recommended_program_focus=_text(q.get("recommended_program_focus")),
            feedback=feedback,
            skill_tags=_string_list(q.get("skill_tags")) if isinstance(q.get("skill_tags"), list) else None,
            correct_answer=_text(q.get("correct_answer")),
            points_possible=_number(q.get("points_possible")),
            points_awarded=_number(q.get("points_awarded")),
        ))

    return ExamAnalysisResult(
        exam_title=_text(parsed.get("exam_title")) or lesson_title or "Exam",
        subject=_text(parsed.get("subject")),
        detected_student_name=_text(parsed.get("detected_student_name")),
        raw_text=_text(parsed.get("raw_text")),
        grade_text=_text(parsed.get("grade_text")),
        overall_score=_number(parsed.get("overall_score")),
        max_score=_number(parsed.get("max_score")),
        advice_summary=_string_list(parsed.get("advice_summary")),
        program_recommendations=_string_list(parsed.get("program_recommendations")),
        questions=normalized,
    )


def parse_student_analysis(parsed: Dict[str, Any]) -> StudentAnalysis:
    keys = ("strengths", "weaknesses", "recommendations")
    if not all(isinstance(parsed.get(k), list) for k in keys):
        raise LLMError("LLM response missing strengths/weaknesses/recommendations")
    return StudentAnalysis(**{k: _string_list(parsed[k]) for k in keys})


def parse_registry_extraction(parsed: Dict[str, Any]) -> StudentRegistryExtraction:
    students = []
    for raw in parsed.get("students") or []:
        if not isinstance(raw, dict):
            continue
        name = _text(raw.get("name"))
        if not name or not name.strip():
            continue
        age = raw.get("age")
        students.append(ExtractedStudent(
            name=name.strip(),
            age=int(age) if isinstance(age, (int, float)) and not isinstance(age, bool) else None,
        ))
    return StudentRegistryExtraction(
        students=students,
        raw_text=_text(parsed.get("raw_text")),
        detected_format=_text(parsed.get("detected_format")),
    )
