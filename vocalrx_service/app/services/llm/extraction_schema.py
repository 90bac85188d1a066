# app/services/llm/extraction_schema.py

_NULLABLE_STR = {"type": ["string", "null"]}

MEDICINE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "brand_name": _NULLABLE_STR,
        "generic_name": _NULLABLE_STR,
        "dosage": _NULLABLE_STR,
        "frequency": _NULLABLE_STR,
        "route": _NULLABLE_STR,
        "duration": _NULLABLE_STR,
        "remarks": _NULLABLE_STR,
    },
    "required": ["brand_name", "generic_name", "dosage", "frequency", "route", "duration", "remarks"],
}

ADVICE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "diet": _NULLABLE_STR,
        "exercise": _NULLABLE_STR,
        "sleep": _NULLABLE_STR,
        "other": _NULLABLE_STR,
    },
    "required": ["diet", "exercise", "sleep", "other"],
}

PRESCRIPTION_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "chief_complaints": _NULLABLE_STR,
        "clinical_findings": _NULLABLE_STR,
        "diagnosis": _NULLABLE_STR,
        "prescribed_investigations": {"type": "array", "items": {"type": "string"}},
        "medicines": {"type": "array", "items": MEDICINE_SCHEMA},
        "advice": ADVICE_SCHEMA,
        "followup_date": {**_NULLABLE_STR, "description": "YYYY-MM-DD"},
    },
    "required": [
        "chief_complaints",
        "clinical_findings",
        "diagnosis",
        "prescribed_investigations",
        "medicines",
        "advice",
        "followup_date",
    ],
}
