"""Prompt text for every pipeline stage.

Kept apart from the stage logic so that wording changes never touch
control flow. All builders are pure functions of their arguments.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import json
from typing import TYPE_CHECKING, Any

from gemini_tutor.constants import BOX_SCALE_MAX, FINISH_EXAM_COMMAND

if TYPE_CHECKING:
    from gemini_tutor.core.types import ChatTurn, ExamConfig

# --- Shared ---


def auxiliary_context(text: str) -> str:
    """Extra context extracted from an upload (OCR, PDF text layer)"""  # noqa: D415
    return f"\n[EXTRACTED TEXT CONTEXT FROM FILE]:\n{text}\n"


def format_timestamp(seconds: float) -> str:
    """``HH:MM:SS`` for a playback position in seconds."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


# --- Homework ---

TUNING_PROMPT = (
    "Analyze this input. Identify subject/topic. List 3 grading rules. Return JSON."
)


def deep_analysis_prompt(subject: str | None, grading_rules: Sequence[str]) -> str:
    rules = ", ".join(grading_rules) if grading_rules else "Standard grading"
    return f"""
Expert Professor in {subject or "the identified subject"}.
RULES: {rules}.

TASK:
1. Analyze the image visually pixel-by-pixel.
2. Identify specific errors in the student's work.
3. CRITICAL: For each error, provide precise bounding box coordinates in
   'error_location' on a 0-{BOX_SCALE_MAX} integer scale (ymin, xmin, ymax, xmax),
   origin at the top-left corner. Give all four coordinates or none.
   - The box MUST tightly enclose the specific part of the work that is incorrect.
   - Do not guess. If you cannot see the error clearly, mark it generally.
4. Provide 'complete_solution' and 'step_by_step' corrections.
5. If a visual aid is needed, provide 'visual_aid_prompt'.

Return structured JSON.
"""


def refinement_prompt(tagged_records: Sequence[dict[str, Any]]) -> str:
    """Ask for corrected versions of low-confidence records.

    Each record carries its ``id``; the model must echo it so corrections
    can be matched back to their originals.
    """
    return f"""
CRITICAL REVIEW: You previously analyzed the following problems but flagged them
with low confidence or warnings.

PROBLEMS TO REFINE: {json.dumps(list(tagged_records), ensure_ascii=False)}

Your Goal:
1. Re-read the problem statement from the original input.
2. Check the 'error_location' bounding boxes. Are they accurately targeting the
   mistake? If not, adjust the coordinates (0-{BOX_SCALE_MAX} scale).
3. Address the 'rendering_note' or 'warning' specifically.
4. Provide a corrected, high-confidence analysis for THESE problems only.
5. Copy each problem's "id" unchanged into its corrected version.

Return JSON with key "problems" containing the corrected list.
"""


# --- Visual aids ---


def visual_aid_prompt(prompt: str) -> str:
    return (
        f'Educational diagram: "{prompt}". White background. Clear labels. High contrast.'
    )


def visual_validation_prompt(problem_statement: str) -> str:
    return (
        f'Verify if image matches: "{problem_statement}". '
        'JSON: { "isAccurate": boolean, "critique": string }'
    )


# --- Video ---


def video_frame_prompt(question: str, timestamp: float, *, fact_check: bool) -> str:
    prompt = f"""
The user is watching a video.
This image is the frame at timestamp {format_timestamp(timestamp)}.
User Question: "{question}"
Analyze the whiteboard/screen content in this frame carefully.
"""
    if fact_check:
        return prompt + (
            " IMPORTANT: Verify any facts visible on screen. "
            "Return structured JSON with 'analysis', 'fact_checks' and 'transcribed_text'."
        )
    return prompt + (
        " Return structured JSON with 'analysis' and 'transcribed_text' if applicable."
    )


def youtube_segment_prompt(
    url: str, question: str, timestamp: float, *, fact_check: bool, full_video: bool
) -> str:
    focus = (
        "Analyze the video broadly."
        if full_video
        else "Focus on the context around the provided timestamp."
    )
    verify = (
        "IMPORTANT: Verify any claims found against reliable external sources."
        if fact_check
        else ""
    )
    return f"""
I am analyzing a specific YouTube video: {url}
Current Timestamp: {format_timestamp(timestamp)}.
User Question: "{question}"

TASK:
1. Use Google Search to find the transcript, detailed summaries, or scene-by-scene
   breakdowns of this video.
2. Answer the user's question based *strictly* on the search results.
3. If you cannot find specific visual details for this timestamp via search, state:
   "I cannot directly see YouTube visuals, but based on summaries..." and give your
   best estimate found in text.
4. Do NOT hallucinate content.

{focus}
{verify}
"""


# --- Math lab ---


def text_to_math_prompt(text: str) -> str:
    return f"""
Act as a mathematical formatter. Convert the following text input into a standard
LaTeX expression.
Input: "{text}"

Rules:
1. Output ONLY the raw LaTeX string. No markdown formatting (```), no explanations.
2. Do NOT generate a full LaTeX document (no \\documentclass, \\usepackage).
3. If the input is a request to plot/graph, output only the function equation
   in LaTeX (e.g., "y = x^2").
4. Strip any display math delimiters like \\[ \\] or $$.
"""


def math_grounding_prompt(problem: str) -> str:
    return f'Find data required to solve this problem: "{problem}". Return a summary of values.'


def math_solve_prompt(
    problem: str,
    *,
    verified_latex: str | None = None,
    grounding: str | None = None,
    history: Iterable[str] = (),
) -> str:
    context = []
    if verified_latex:
        context.append(f'CONTEXT: Verified LaTeX: "{verified_latex}"')
    if grounding:
        context.append(f"REAL-WORLD CONTEXT: {grounding}")
    history = list(history)
    if history:
        context.append("PREVIOUS CODE EXECUTION HISTORY:\n" + "\n".join(history) + "\n")
    context_block = "\n".join(context)
    return f"""
You are an advanced Python Math Engine.
{context_block}

User Input: "{problem}"

TASK:
1. Interpret logic.
2. Write Python code to solve or plot (using matplotlib/numpy).
3. EXECUTE/SIMULATE the code mentally to produce the result.

CRITICAL - PLOTTING INSTRUCTIONS:
- If the user request implies a visual (plot, graph, draw, visualize), you MUST
  generate the raw SVG XML.
- The SVG must be self-contained (starting with <svg>).
- Use a white or transparent background.
- Ensure the SVG XML string is properly escaped for JSON.

Return JSON: {{
    "latex": "optional latex representation",
    "explanation": "concise logic summary",
    "pythonCode": "full script",
    "result": "final output string",
    "plotSvg": "RAW SVG XML STRING (if plot requested, else null)"
}}
"""


def math_verification_prompt(problem: str, explanation: Any, python_code: Any) -> str:
    return f"""
REVIEW THIS SOLUTION:
Problem: "{problem}"

Proposed Logic: "{explanation}"
Proposed Code: "{python_code}"

Task:
1. Does the Python code accurately implement the Logic?
2. Are there potential division by zero errors or logic gaps?
3. Does it match the original problem constraints?

If PERFECT, return {{ "valid": true }}.
If FLAWED, return {{ "valid": false, "corrected_response": {{ ...same schema as input... }} }}
"""


# --- Exam prep ---


def exam_persona(config: ExamConfig) -> str:
    """System instruction fixed for the lifetime of an exam session."""
    formats = ", ".join(config.question_formats) or "Mixed"
    count = config.number_of_questions

    if config.strict_mode:
        persona = f"""
You are a STRICT EXAM INVIGILATOR.
MODE: SIMULATION (Strict).
Subject: {config.subject}. Grade: {config.grade_level}.
Total Questions: {count}.
Question Formats Allowed: {formats}.
"""
        if config.total_marks:
            persona += f"Total Marks: {config.total_marks}.\n"
        if config.duration_minutes:
            persona += f"Time Limit: {config.duration_minutes} minutes.\n"
        persona += f"""
RULES:
1. Ask ONE question at a time. Number them (e.g., "Question 1 of {count}").
2. Wait for the user's answer.
3. DO NOT give feedback, hints, or grades immediately. Just say "Answer recorded."
   or "Proceeding..." and ask the next question.
4. If the user asks for help, refuse politely: "This is a strict exam. I cannot help you."
5. When the user sends the command "{FINISH_EXAM_COMMAND}" OR after Question {count}
   is answered, output a grading report.

Grading Report Format (at the end):
- List each question.
- User's Answer vs Correct Answer.
- Score (e.g., 5/10).
- Feedback for improvement.
"""
    else:
        persona = f"""
You are a SOCRATIC TUTOR (Study Buddy).
Subject: {config.subject}. Grade: {config.grade_level}.

RULES:
1. Ask questions one by one. Use these formats: {formats}.
2. If the user is wrong, give a HINT. Do not give the answer immediately. Guide them.
3. Be encouraging and helpful.
"""

    guidelines = (config.institution_guidelines or "").strip()
    if guidelines:
        persona += f'\nIMPORTANT INSTITUTION GUIDELINES:\n"{guidelines}"\n'
    if config.real_world_mode:
        persona += (
            "\nREAL-WORLD MODE: Incorporate recent news/events into your questions "
            "using Google Search.\n"
        )
    return persona


def exam_opening_message(*, strict: bool) -> str:
    if strict:
        return "Start the exam immediately with Question 1."
    return "Hello, I am ready to study. Start with the first question."


REFERENCE_MATERIAL_NOTE = "Here is the reference material."


def reference_material_text(text: str) -> str:
    return f"Context Material:\n{text}"


def format_transcript(turns: Iterable[ChatTurn]) -> str:
    """Serialize a session as ``ROLE: text`` lines"""  # noqa: D415
    return "\n".join(f"{turn.role.upper()}: {turn.text}" for turn in turns)


def exam_audit_prompt(transcript: str) -> str:
    return f"""
AUDIT THIS EXAM SESSION.
You are an independent auditor.

Review the following exam transcript between an AI Invigilator and a Student.
TRANSCRIPT:
{transcript}

Tasks:
1. Calculate the final score independently.
2. Rate the "Fairness" of the invigilator (0-100). Did they grade too harshly?
3. List any discrepancies where the invigilator was wrong.

Return JSON.
"""


# --- Chat ---


def chat_context(text: str) -> str:
    return f"Context:\n{text}"
