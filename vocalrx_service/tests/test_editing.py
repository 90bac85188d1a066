import pytest

from app.schemas.models import Advice, Medicine, Prescription
from app.services.editing import (
    add_investigation,
    add_medicine,
    apply_edit,
    format_drug_name,
    parse_drug_name,
    remove_investigation,
    remove_medicine,
    replace_investigation,
    set_advice,
    set_field,
    update_medicine,
)
from app.services.errors import InputValidationError

@pytest.fixture
def rx():
    return Prescription(
        chief_complaints="chest pain",
        diagnosis="angina",
        prescribed_investigations=["ECG", "Lipid Profile"],
        medicines=[
            Medicine(brand_name="Ecosprin", generic_name="Aspirin", dosage="75mg", frequency="OD", route="Oral"),
            Medicine(generic_name="Atorvastatin", dosage="40mg", frequency="HS", route="Oral"),
        ],
        advice=Advice(diet="Low salt"),
        followup_date="2026-10-26",
    )

def test_edit_one_field_leaves_everything_else(rx):
    before = rx.model_dump()
    edited = set_field(rx, "diagnosis", "unstable angina")

    assert edited.diagnosis == "unstable angina"
    assert rx.model_dump() == before
    after = edited.model_dump()
    after["diagnosis"] = "angina"
    assert after == before

def test_edited_copy_shares_no_medicines(rx):
    edited = update_medicine(rx, 0, "dosage", "150mg")
    assert edited.medicines[0].dosage == "150mg"
    assert rx.medicines[0].dosage == "75mg"
    assert edited.medicines[1] == rx.medicines[1]
    assert edited.medicines[1] is not rx.medicines[1]

def test_unknown_fields_are_rejected(rx):
    with pytest.raises(InputValidationError):
        set_field(rx, "medicines", None)
    with pytest.raises(InputValidationError):
        set_advice(rx, "smoking", "stop")
    with pytest.raises(InputValidationError):
        update_medicine(rx, 0, "colour", "red")

def test_set_advice(rx):
    edited = set_advice(rx, "sleep", "8 hours")
    assert edited.advice.sleep == "8 hours"
    assert edited.advice.diet == "Low salt"
    assert rx.advice.sleep is None

def test_add_and_remove_medicine(rx):
    added = add_medicine(rx)
    assert len(added.medicines) == 3
    assert added.medicines[-1] == Medicine(route="Oral")

    first = add_medicine(rx, Medicine(generic_name="Clopidogrel"), at=0)
    assert first.medicines[0].generic_name == "Clopidogrel"

    removed = remove_medicine(rx, 0)
    assert [m.generic_name for m in removed.medicines] == ["Atorvastatin"]
    assert len(rx.medicines) == 2

@pytest.mark.parametrize("index", [-1, 2, 10])
def test_bad_medicine_index(rx, index):
    with pytest.raises(InputValidationError):
        remove_medicine(rx, index)

def test_investigation_edits(rx):
    assert replace_investigation(rx, 1, "HbA1c").prescribed_investigations == ["ECG", "HbA1c"]
    assert add_investigation(rx, "2D Echo").prescribed_investigations == ["ECG", "Lipid Profile", "2D Echo"]
    assert remove_investigation(rx, 0).prescribed_investigations == ["Lipid Profile"]
    assert rx.prescribed_investigations == ["ECG", "Lipid Profile"]
    with pytest.raises(InputValidationError):
        replace_investigation(rx, 5, "TSH")

def test_apply_edit_dispatch(rx):
    edited = apply_edit(rx, "update_medicine", i=1, field="frequency", value="OD")
    assert edited.medicines[1].frequency == "OD"

    with pytest.raises(InputValidationError):
        apply_edit(rx, "rename_patient", name="x")
    with pytest.raises(InputValidationError):
        apply_edit(rx, "remove_medicine", index=0)

@pytest.mark.parametrize("brand, generic, text", [
    ("Ecosprin", "Aspirin", "Ecosprin (Aspirin)"),
    ("Ecosprin", None, "Ecosprin"),
    (None, "Aspirin", "Aspirin"),
    (None, None, ""),
])
def test_format_drug_name(brand, generic, text):
    assert format_drug_name(brand, generic) == text

@pytest.mark.parametrize("text, expected", [
    ("Ecosprin (Aspirin)", ("Ecosprin", "Aspirin")),
    ("  Ecosprin  (Aspirin) ", ("Ecosprin", "Aspirin")),
    ("(Aspirin)", (None, "Aspirin")),
    ("Ecosprin", ("Ecosprin", None)),
    ("", (None, None)),
])
def test_parse_drug_name(text, expected):
    assert parse_drug_name(text) == expected

def test_display_round_trip_limits():
    assert parse_drug_name(format_drug_name("Ecosprin", "Aspirin")) == ("Ecosprin", "Aspirin")
    # a generic-only name comes back as a brand
    assert parse_drug_name(format_drug_name(None, "Aspirin")) == ("Aspirin", None)
