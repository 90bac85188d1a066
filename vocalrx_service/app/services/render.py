# app/services/render.py
from html import escape
from typing import List, Optional

from app.schemas.models import ClinicContext, Prescription
from app.services.editing import format_drug_name

EMPTY = "—"

_STYLE = """
body { font-family: Arial, sans-serif; margin: 32px; color: #222; }
.header { border-bottom: 2px solid #ea580c; padding-bottom: 8px; margin-bottom: 16px; }
.header h1 { margin: 0; color: #ea580c; }
.muted { color: #666; font-size: 12px; }
.row { display: flex; justify-content: space-between; }
h3 { margin: 18px 0 6px; font-size: 15px; border-bottom: 1px solid #ddd; }
table { width: 100%; border-collapse: collapse; font-size: 13px; }
th, td { border: 1px solid #ccc; padding: 4px 6px; text-align: left; }
.signature { margin-top: 48px; text-align: right; }
@media print { body { margin: 12mm; } }
"""

def _e(v: Optional[str]) -> str:
    return escape(v) if v else EMPTY

def _section(title: str, body: Optional[str]) -> str:
    if not body:
        return ""
    return f"<h3>{escape(title)}</h3><p>{escape(body)}</p>"

def _list_section(title: str, items: List[str]) -> str:
    if not items:
        return ""
    lis = "".join(f"<li>{escape(i)}</li>" for i in items)
    return f"<h3>{escape(title)}</h3><ul>{lis}</ul>"

def _medicines_table(rx: Prescription) -> str:
    if not rx.medicines:
        return ""
    rows = []
    for n, m in enumerate(rx.medicines, start=1):
        rows.append(
            "<tr>"
            f"<td>{n}</td>"
            f"<td>{_e(format_drug_name(m.brand_name, m.generic_name))}</td>"
            f"<td>{_e(m.dosage)}</td><td>{_e(m.frequency)}</td><td>{_e(m.route)}</td>"
            f"<td>{_e(m.duration)}</td><td>{_e(m.remarks)}</td>"
            "</tr>"
        )
    return (
        "<h3>&#8478; Medicines</h3><table>"
        "<tr><th>#</th><th>Medicine</th><th>Dosage</th><th>Frequency</th>"
        "<th>Route</th><th>Duration</th><th>Remarks</th></tr>"
        + "".join(rows)
        + "</table>"
    )

def _lab_table(c: ClinicContext) -> str:
    if not c.lab_results:
        return ""
    rows = "".join(
        f"<tr><td>{escape(r.test)}</td><td>{escape(r.result)}</td>"
        f"<td>{_e(r.date)}</td><td>{escape(r.status)}</td></tr>"
        for r in c.lab_results
    )
    return (
        "<h3>Recent Lab Results</h3><table>"
        "<tr><th>Test</th><th>Result</th><th>Date</th><th>Status</th></tr>"
        f"{rows}</table>"
    )

def _advice_lines(rx: Prescription) -> List[str]:
    a = rx.advice
    pairs = [("Diet", a.diet), ("Exercise", a.exercise), ("Sleep", a.sleep), ("Other", a.other)]
    return [f"{label}: {value}" for label, value in pairs if value]

def render_prescription_html(rx: Prescription, context: Optional[ClinicContext] = None) -> str:
    """Standalone printable HTML merging the prescription with the static clinic data."""
    c = context or ClinicContext()

    header = (
        '<div class="header row"><div>'
        f"<h1>{escape(c.clinic_name)}</h1>"
        f'<div class="muted">{_e(c.clinic_tagline)}</div>'
        f'<div class="muted">{_e(c.clinic_address)} | {_e(c.clinic_phone)}</div>'
        f'<div class="muted">Timings: {_e(c.clinic_timings)}</div>'
        "</div><div>"
        f"<strong>{escape(c.doctor_name)}</strong><br>"
        f'<span class="muted">{_e(c.doctor_qualification)}</span><br>'
        f'<span class="muted">Reg. No: {_e(c.doctor_reg_no)}</span>'
        "</div></div>"
    )
    patient = (
        '<div class="row">'
        f"<div><strong>Patient:</strong> {_e(c.patient_name)} ({_e(c.patient_id)}) | "
        f"{_e(c.patient_age)} yrs | {_e(c.patient_gender)} | {_e(c.patient_phone)}</div>"
        f"<div><strong>Date:</strong> {escape(c.prescription_date)}</div>"
        "</div>"
    )
    vitals = (
        '<div class="muted">'
        f"Temp: {_e(c.vitals_temp)} | BP: {_e(c.vitals_bp)} | "
        f"Height: {_e(c.vitals_height)} | Weight: {_e(c.vitals_weight)}"
        + (f" | HR: {escape(c.vitals_heart_rate)}" if c.vitals_heart_rate else "")
        + "</div>"
    )
    history = _list_section("Known Conditions", c.conditions) + _lab_table(c)

    body = "".join([
        _section("Chief Complaints", rx.chief_complaints),
        _section("Clinical Findings", rx.clinical_findings),
        _section("Diagnosis", rx.diagnosis),
        _list_section("Investigations", rx.prescribed_investigations),
        _medicines_table(rx),
        _list_section("Advice", _advice_lines(rx)),
        _section("Follow-up", rx.followup_date),
    ])

    signature = f'<div class="signature">{escape(c.doctor_name)}<br><span class="muted">Signature</span></div>'

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>Prescription - {_e(c.patient_name)}</title>"
        f"<style>{_STYLE}</style></head><body>"
        f"{header}{patient}{vitals}{history}{body}{signature}"
        "</body></html>"
    )

def render_prescription_text(rx: Prescription, context: Optional[ClinicContext] = None) -> str:
    c = context or ClinicContext()
    lines = [
        c.clinic_name,
        f"{c.doctor_name}, {c.doctor_qualification or ''}".rstrip(", "),
        f"Patient: {c.patient_name or EMPTY} | Age: {c.patient_age or EMPTY} | {c.patient_gender or EMPTY}",
        f"Date: {c.prescription_date}",
    ]
    if c.vitals_heart_rate:
        lines.append(f"HR: {c.vitals_heart_rate}")
    if c.conditions:
        lines.append(f"Known Conditions: {', '.join(c.conditions)}")
    for r in c.lab_results:
        lines.append(f"Lab: {r.test} {r.result} ({r.status}{', ' + r.date if r.date else ''})")
    lines.append("")

    for title, value in (
        ("Chief Complaints", rx.chief_complaints),
        ("Clinical Findings", rx.clinical_findings),
        ("Diagnosis", rx.diagnosis),
    ):
        if value:
            lines.append(f"{title}: {value}")

    if rx.prescribed_investigations:
        lines.append("Investigations:")
        lines.extend(f"  - {t}" for t in rx.prescribed_investigations)

    if rx.medicines:
        lines.append("Rx:")
        for n, m in enumerate(rx.medicines, start=1):
            parts = [p for p in (m.dosage, m.frequency, m.route, m.duration) if p]
            line = f"  {n}. {format_drug_name(m.brand_name, m.generic_name)}"
            if parts:
                line += " — " + " | ".join(parts)
            if m.remarks:
                line += f" ({m.remarks})"
            lines.append(line)

    advice = _advice_lines(rx)
    if advice:
        lines.append("Advice:")
        lines.extend(f"  - {a}" for a in advice)

    if rx.followup_date:
        lines.append(f"Follow-up: {rx.followup_date}")

    return "\n".join(lines) + "\n"
