"""Response schemas sent with schema-constrained calls.

Written in the Gemini ``Schema`` dialect (upper-case types, ``nullable``).
Providers treat them as advice, so every consumer still sanitizes output.
"""

from __future__ import annotations

import copy
from typing import Any

_STRING: dict[str, Any] = {"type": "STRING"}
_STRING_LIST: dict[str, Any] = {"type": "ARRAY", "items": _STRING}

TUNING_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "subject": _STRING,
        "topic": _STRING,
        "has_student_solution": {"type": "BOOLEAN"},
        "grading_rules": _STRING_LIST,
    },
    "required": ["subject", "topic", "has_student_solution", "grading_rules"],
}

_BOX_COORDINATE: dict[str, Any] = {"type": "INTEGER", "minimum": 0, "maximum": 1000}

PROBLEM_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "problem_statement": _STRING,
        "student_answer": {"type": "STRING", "nullable": True},
        "is_correct": {"type": "BOOLEAN", "nullable": True},
        "error_location": {
            "type": "OBJECT",
            "description": "Box on a 0-1000 grid, origin top-left. All four or none.",
            "properties": {
                "ymin": _BOX_COORDINATE,
                "xmin": _BOX_COORDINATE,
                "ymax": _BOX_COORDINATE,
                "xmax": _BOX_COORDINATE,
            },
            "required": ["ymin", "xmin", "ymax", "xmax"],
            "nullable": True,
        },
        "complete_solution": _STRING,
        "step_by_step": _STRING_LIST,
        "key_concepts": _STRING_LIST,
        "visual_aid_prompt": {"type": "STRING", "nullable": True},
        "validation_check": {
            "type": "OBJECT",
            "properties": {
                "status": {"type": "STRING", "enum": ["verified", "warning"]},
                "confidence_score": {"type": "INTEGER"},
                "rendering_note": {"type": "STRING", "nullable": True},
            },
            "required": ["status", "confidence_score"],
        },
    },
    "required": [
        "problem_statement",
        "complete_solution",
        "step_by_step",
        "key_concepts",
        "validation_check",
    ],
}

ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"problems": {"type": "ARRAY", "items": PROBLEM_SCHEMA}},
    "required": ["problems"],
}


def _with_position_id(schema: dict[str, Any]) -> dict[str, Any]:
    refined = copy.deepcopy(schema)
    item = refined["properties"]["problems"]["items"]
    item["properties"]["id"] = {
        "type": "INTEGER",
        "description": "The id of the problem being corrected, echoed unchanged.",
    }
    item["required"] = ["id", *item["required"]]
    return refined


REFINEMENT_SCHEMA: dict[str, Any] = _with_position_id(ANALYSIS_SCHEMA)

VISUAL_VALIDATION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"isAccurate": {"type": "BOOLEAN"}, "critique": _STRING},
    "required": ["isAccurate"],
}

VIDEO_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "analysis": _STRING,
        "transcribed_text": {
            "type": "STRING",
            "description": "Verbatim text visible on board/screen",
        },
        "fact_checks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "claim": _STRING,
                    "verdict": {
                        "type": "STRING",
                        "enum": ["verified", "disputed", "outdated"],
                    },
                    "correction": _STRING,
                    "source": _STRING,
                },
            },
        },
    },
    "required": ["analysis"],
}

EXAM_AUDIT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "auditedScore": _STRING,
        "fairnessScore": {"type": "NUMBER"},
        "discrepancies": _STRING_LIST,
        "feedback": _STRING,
    },
    "required": ["auditedScore", "fairnessScore", "discrepancies", "feedback"],
}
