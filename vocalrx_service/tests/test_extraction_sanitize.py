import pytest

from app.services.llm.extraction_sanitize import (
    clean_text,
    flatten_investigations,
    normalize_dosage,
    normalize_followup,
    normalize_frequency,
    normalize_route,
    sanitize_advice,
    sanitize_medicines,
    sanitize_prescription,
)

from conftest import TODAY

@pytest.mark.parametrize("raw,expected", [
    ("once daily", "OD"),
    ("Once a day", "OD"),
    ("od", "OD"),
    ("daily", "OD"),
    ("twice a day", "BD"),
    ("BID", "BD"),
    ("1-0-1", "BD"),
    ("three times a day", "TDS"),
    ("tid", "TDS"),
    ("every 6 hours", "QID"),
    ("four times daily", "QID"),
    ("as needed for pain", "SOS"),
    ("PRN", "SOS"),
    ("once a week", "Weekly"),
    ("at bedtime", "HS"),
    ("once weekly", "Weekly"),
    ("once a week for 4 weeks", "Weekly"),
    ("twice daily for 2 weeks", "BD"),
    ("twice a week", "twice a week"),
    ("twice weekly", "twice weekly"),
    ("three times a week", "three times a week"),
    ("once a month", "once a month"),
    ("on alternate days", "on alternate days"),
    ("every other day", "every other day"),
])
def test_normalize_frequency(raw, expected):
    assert normalize_frequency(raw) == expected

def test_unclear_frequency_is_kept_as_dictated():
    assert normalize_frequency("alternate mornings") == "alternate mornings"
    assert normalize_frequency(None) is None
    assert normalize_frequency("  ") is None

@pytest.mark.parametrize("raw,expected", [
    ("orally", "Oral"),
    ("by mouth", "Oral"),
    ("PO", "Oral"),
    ("intravenous", "IV"),
    ("i.v.", "IV"),
    ("IM", "IM"),
    ("apply locally", "Topical"),
    ("sublingual", "Sublingual"),
    ("nebulisation", "Inhalation"),
])
def test_normalize_route(raw, expected):
    assert normalize_route(raw) == expected

def test_ambiguous_route_is_kept():
    assert normalize_route("oral or IV") == "oral or IV"

@pytest.mark.parametrize("raw,expected", [
    ("75 mg", "75mg"),
    ("75 milligrams", "75mg"),
    ("500MG", "500mg"),
    ("2.5 ml", "2.5ml"),
    ("10 units", "10units"),
    ("half tablet", "half tablet"),
])
def test_normalize_dosage(raw, expected):
    assert normalize_dosage(raw) == expected

def test_investigations_directives_and_duplicates():
    raw = [
        "Please check CBC",
        "Investigations advised: ECG, Chest X-ray",
        "ecg",
        "get lipid profile done",
        "investigations advised",
        "",
        None,
    ]
    assert flatten_investigations(raw) == ["CBC", "ECG", "Chest X-ray", "lipid profile"]

def test_investigations_single_string_is_split():
    assert flatten_investigations("HbA1c; TSH\nurine routine") == ["HbA1c", "TSH", "urine routine"]

@pytest.mark.parametrize("phrase", [
    "blood sugar fasting and postprandial",
    "Blood sugar fasting & PP",
    "fasting and postprandial blood sugar",
    "FBS and PPBS",
])
def test_compound_sugar_tests_are_split(phrase):
    assert flatten_investigations([phrase]) == ["Fasting Blood Sugar", "Postprandial Blood Sugar"]

def test_single_test_with_and_in_name_is_not_split():
    assert flatten_investigations(["Urea and electrolytes"]) == ["Urea and electrolytes"]

@pytest.mark.parametrize("phrase", [
    "Blood sugar (fasting, postprandial)",
    "check blood sugar (fasting and PP)",
])
def test_parenthesised_compound_is_split(phrase):
    assert flatten_investigations([phrase]) == ["Fasting Blood Sugar", "Postprandial Blood Sugar"]

def test_commas_inside_parentheses_do_not_split():
    assert flatten_investigations("ECG, Lipid profile (fasting, 12 hours), HbA1c") == [
        "ECG",
        "Lipid profile (fasting, 12 hours)",
        "HbA1c",
    ]

def test_medicines_without_a_name_are_dropped_and_duplicates_merged():
    meds = sanitize_medicines([
        {"generic_name": "Metformin", "dosage": "500 mg", "frequency": "twice daily"},
        {"generic_name": "metformin", "dosage": "500mg", "frequency": "BD"},
        {"dosage": "5 mg"},
        "Amlodipine",
        None,
    ])
    assert len(meds) == 1
    assert meds[0].dosage == "500mg"
    assert meds[0].frequency == "BD"

def test_advice_lists_are_joined():
    advice = sanitize_advice({"diet": ["low salt", "avoid oily food"], "exercise": "", "sleep": None})
    assert advice.diet == "low salt; avoid oily food"
    assert advice.exercise is None
    assert advice.other is None

def test_advice_as_plain_string_goes_to_other():
    assert sanitize_advice("Drink plenty of water").other == "Drink plenty of water"

@pytest.mark.parametrize("raw,expected", [
    ("2026-11-02", "2026-11-02"),
    ("02/11/2026", "2026-11-02"),
    ("2 November 2026", "2026-11-02"),
    (None, "2026-10-26"),
    ("next week sometime", "2026-10-26"),
    ("2026-02-30", "2026-10-26"),
])
def test_normalize_followup(raw, expected):
    assert normalize_followup(raw, TODAY) == expected

def test_clean_text():
    assert clean_text("  fever ") == "fever"
    assert clean_text("null") is None
    assert clean_text(["a", "", None, "b"]) == "a; b"
    assert clean_text({"x": 1}) is None

def test_sanitize_prescription_does_not_invent_clinical_content():
    rx = sanitize_prescription({"diagnosis": "Hypertension"}, TODAY)
    assert rx.diagnosis == "Hypertension"
    assert rx.chief_complaints is None
    assert rx.clinical_findings is None
    assert rx.medicines == []
    assert rx.prescribed_investigations == []
