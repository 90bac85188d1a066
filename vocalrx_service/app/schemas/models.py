from datetime import date
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

RenderFormat = Literal["html", "text"]

SAFETY_NOTE = (
    "Draft generated from dictation. The prescribing doctor must review "
    "every field before signing."
)

class Medicine(BaseModel):
    brand_name: Optional[str] = None
    generic_name: Optional[str] = None
    dosage: Optional[str] = Field(default=None, description="e.g. 75mg, 5ml")
    frequency: Optional[str] = Field(default=None, description="OD, BD, TDS, QID, SOS ...")
    route: Optional[str] = Field(default=None, description="Oral, IV, IM, Topical ...")
    duration: Optional[str] = None
    remarks: Optional[str] = None

class Advice(BaseModel):
    diet: Optional[str] = None
    exercise: Optional[str] = None
    sleep: Optional[str] = None
    other: Optional[str] = None

class Prescription(BaseModel):
    chief_complaints: Optional[str] = None
    clinical_findings: Optional[str] = None
    diagnosis: Optional[str] = None
    prescribed_investigations: List[str] = Field(default_factory=list)
    medicines: List[Medicine] = Field(default_factory=list)
    advice: Advice = Field(default_factory=Advice)
    followup_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")

    # list fields are never null, whatever the vendor sent
    @field_validator("prescribed_investigations", "medicines", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("advice", mode="before")
    @classmethod
    def _none_to_advice(cls, v: Any) -> Any:
        return {} if v is None else v

LabStatus = Literal["normal", "abnormal", "critical"]

class LabResult(BaseModel):
    test: str
    result: str
    date: Optional[str] = None
    status: LabStatus = "normal"

class ClinicContext(BaseModel):
    """Static clinic / doctor / patient / vitals data merged into the printout."""

    clinic_name: str = "Heart Care Clinic"
    clinic_tagline: Optional[str] = "Comprehensive Cardiac Care"
    clinic_address: Optional[str] = "123 Medical Street, Mumbai 400001"
    clinic_timings: Optional[str] = "9 AM - 6 PM, Closed on Sundays"
    clinic_phone: Optional[str] = "+91-9876543210"

    doctor_name: str = "Dr. Sarah Johnson"
    doctor_qualification: Optional[str] = "MBBS, MD (Cardiology)"
    doctor_reg_no: Optional[str] = "MH12345"

    patient_id: Optional[str] = "P001234"
    patient_name: Optional[str] = "John Doe"
    patient_age: Optional[str] = "45"
    patient_gender: Optional[str] = "Male"
    patient_phone: Optional[str] = "+91-9876543211"

    prescription_date: str = Field(default_factory=lambda: date.today().strftime("%d/%m/%Y"))

    vitals_temp: Optional[str] = "98.6°F"
    vitals_bp: Optional[str] = "140/90 mmHg"
    vitals_height: Optional[str] = "5'8\""
    vitals_weight: Optional[str] = "70kg"
    vitals_heart_rate: Optional[str] = None

    conditions: List[str] = Field(default_factory=list)
    lab_results: List[LabResult] = Field(default_factory=list)

class TranscriptRequest(BaseModel):
    transcript: str

class TranscribeResponse(BaseModel):
    transcript: str

class RefineResponse(BaseModel):
    refined: str

class DictationResponse(BaseModel):
    transcript: str
    refined: Optional[str] = None
    prescription: Prescription
    audit: List[Dict[str, Any]] = []
    safety_note: str = SAFETY_NOTE

class RenderRequest(BaseModel):
    prescription: Prescription
    context: Optional[ClinicContext] = None
