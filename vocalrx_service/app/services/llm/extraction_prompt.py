# app/services/llm/extraction_prompt.py
from datetime import date, timedelta
from typing import Tuple

FOLLOWUP_DEFAULT_DAYS = 7

EXTRACT_SYSTEM_PROMPT = (
    "You are a medical prescription assistant.\n"
    "Extract ONLY the doctor's own dictated contribution from the transcript.\n"
    "Hard rules:\n"
    "- Do NOT include patient demographics, clinic details, vitals, or lab/imaging reports "
    "coming from other departments. Those come from other systems.\n"
    "- Focus only on complaints, findings, diagnosis, medicines, investigations and advice "
    "as dictated by the doctor.\n"
    "- If the doctor did not dictate a field, return null for it ([] for list fields). "
    "Do NOT invent values.\n"
    "- prescribed_investigations is a flat list of individual test names. Split compound "
    "phrases into separate canonical tests (e.g. 'blood sugar fasting and postprandial' -> "
    "'Fasting Blood Sugar', 'Postprandial Blood Sugar'). Never include directive phrases "
    "such as 'please check' or 'investigations advised' in a test name.\n"
    "- Each medicine has brand_name, generic_name, dosage, frequency, route, duration, remarks.\n"
    "  * dosage with standard units, no space: 75mg, 500mg, 5ml, 10units\n"
    "  * frequency as OD, BD, TDS, QID, SOS, HS when unambiguous (once daily -> OD)\n"
    "  * route as Oral, IV, IM, SC, Topical, Sublingual, Inhalation when unambiguous\n"
    "- followup_date must be YYYY-MM-DD. Resolve relative phrases ('in a week', 'after 10 days') "
    "against today's date. If no follow-up is mentioned, use {default_followup} "
    "(one week from today).\n"
    "- Output ONLY valid JSON matching the schema. No prose, no markdown fences.\n"
)

EXTRACT_USER_TEMPLATE = (
    "Today's date: {today}\n\n"
    "Transcript:\n"
    '"""{transcript}"""\n\n'
    "Return JSON with this schema:\n"
    "{{\n"
    '  "chief_complaints": string or null,\n'
    '  "clinical_findings": string or null,\n'
    '  "diagnosis": string or null,\n'
    '  "prescribed_investigations": ["Test 1", "Test 2"],\n'
    '  "medicines": [\n'
    "    {{\n"
    '      "brand_name": string or null,\n'
    '      "generic_name": string or null,\n'
    '      "dosage": string or null,\n'
    '      "frequency": string or null,\n'
    '      "route": string or null,\n'
    '      "duration": string or null,\n'
    '      "remarks": string or null\n'
    "    }}\n"
    "  ],\n"
    '  "advice": {{\n'
    '    "diet": string or null,\n'
    '    "exercise": string or null,\n'
    '    "sleep": string or null,\n'
    '    "other": string or null\n'
    "  }},\n"
    '  "followup_date": string (YYYY-MM-DD)\n'
    "}}"
)

def default_followup(today: date) -> str:
    return (today + timedelta(days=FOLLOWUP_DEFAULT_DAYS)).isoformat()

def build_extraction_prompt(transcript: str, today: date) -> Tuple[str, str]:
    """Returns (system, user) for one extraction call."""
    system = EXTRACT_SYSTEM_PROMPT.format(default_followup=default_followup(today))
    user = EXTRACT_USER_TEMPLATE.format(today=today.isoformat(), transcript=transcript)
    return system, user
