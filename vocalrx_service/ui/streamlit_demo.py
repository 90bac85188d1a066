from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from app.schemas.models import Medicine, Prescription
from app.services.editing import format_drug_name, parse_drug_name, set_advice, set_field

load_dotenv()

st.set_page_config(page_title="VocalRx", layout="wide")

# ---------------------------
# Config
# ---------------------------
DEFAULT_API_BASE = "http://127.0.0.1:8000"
API_BASE = st.sidebar.text_input("API Base URL", value=DEFAULT_API_BASE)

# ---------------------------
# Helpers (API)
# ---------------------------
def api_post(path: str, payload: Dict[str, Any], params: Optional[Dict[str, Any]] = None) -> requests.Response:
    url = f"{API_BASE}{path}"
    r = requests.post(url, json=payload, params=params or {}, timeout=120)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r

def api_post_audio(path: str, audio: bytes, content_type: str = "audio/wav") -> Dict[str, Any]:
    url = f"{API_BASE}{path}"
    r = requests.post(url, data=audio, headers={"Content-Type": content_type}, timeout=120)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

# ---------------------------
# Medicines table <-> model
# ---------------------------
MED_COLUMNS = ["medicine", "dosage", "frequency", "route", "duration", "remarks"]

def meds_to_df(meds: List[Medicine]) -> pd.DataFrame:
    rows = [
        {
            "medicine": format_drug_name(m.brand_name, m.generic_name),
            "dosage": m.dosage or "",
            "frequency": m.frequency or "",
            "route": m.route or "",
            "duration": m.duration or "",
            "remarks": m.remarks or "",
        }
        for m in meds
    ]
    return pd.DataFrame(rows, columns=MED_COLUMNS)

def df_to_meds(df: pd.DataFrame) -> List[Medicine]:
    meds: List[Medicine] = []
    for row in df.fillna("").to_dict(orient="records"):
        brand, generic = parse_drug_name(str(row.get("medicine", "")))
        if not (brand or generic):
            continue
        meds.append(Medicine(
            brand_name=brand,
            generic_name=generic,
            **{k: (str(row.get(k) or "").strip() or None) for k in MED_COLUMNS[1:]},
        ))
    return meds

# ---------------------------
# Session state
# ---------------------------
def reset_session():
    st.session_state.transcript = ""
    st.session_state.prescription = None
    st.session_state.last_audio_id = None
    st.session_state.html = None

if "transcript" not in st.session_state:
    reset_session()

# ---------------------------
# UI
# ---------------------------
st.title("🎙️ VocalRx — dictate a prescription")

col_left, col_right = st.columns([1, 1.2])

with col_left:
    st.subheader("1) Voice Recording")

    # the browser widget owns the microphone stream and releases it on stop
    recording = st.audio_input("Record dictation")
    if recording is not None:
        audio_id = getattr(recording, "file_id", None) or recording.name
        if audio_id != st.session_state.last_audio_id:
            st.session_state.last_audio_id = audio_id
            with st.spinner("Processing audio..."):
                try:
                    resp = api_post_audio("/ai/transcribe", recording.getvalue(), recording.type or "audio/wav")
                    text = resp["transcript"]
                    prev = st.session_state.transcript
                    st.session_state.transcript = f"{prev}\n\n{text}" if prev else text
                except Exception as e:
                    st.error(f"Error transcribing audio: {e}")

    if st.button("🔄 Record Again"):
        reset_session()
        st.rerun()

    st.subheader("2) Transcript")
    st.session_state.transcript = st.text_area(
        "Transcript (editable)",
        value=st.session_state.transcript,
        height=220,
    )

    colA, colB = st.columns(2)
    with colA:
        if st.button("✨ Refine (/ai/refine)"):
            if not st.session_state.transcript.strip():
                st.warning("No transcript available to refine.")
            else:
                try:
                    resp = api_post("/ai/refine", {"transcript": st.session_state.transcript}).json()
                    st.session_state.transcript = resp["refined"]
                    st.rerun()
                except Exception as e:
                    st.error(str(e))

    with colB:
        if st.button("🧾 Extract Prescription (/ai/extract)"):
            if not st.session_state.transcript.strip():
                st.warning("No transcript available to extract prescription from.")
            else:
                try:
                    resp = api_post("/ai/extract", {"transcript": st.session_state.transcript}).json()
                    # a new extraction replaces the previous one entirely
                    st.session_state.prescription = Prescription(**resp)
                    st.session_state.html = None
                except Exception as e:
                    st.error(str(e))

with col_right:
    st.subheader("3) Extracted Prescription (editable)")
    rx: Optional[Prescription] = st.session_state.prescription

    if rx is None:
        st.caption("Nothing extracted yet.")
    else:
        for field, label in (
            ("chief_complaints", "Chief Complaints"),
            ("clinical_findings", "Clinical Findings"),
            ("diagnosis", "Diagnosis"),
        ):
            value = st.text_area(label, value=getattr(rx, field) or "", height=80)
            rx = set_field(rx, field, value.strip() or None)

        tests = st.text_area(
            "Investigations (one per line)",
            value="\n".join(rx.prescribed_investigations),
            height=100,
        )
        rx = rx.model_copy(update={"prescribed_investigations": [t.strip() for t in tests.splitlines() if t.strip()]})

        st.write("**Medicines** — `Brand (Generic)` in the first column")
        meds_df = st.data_editor(
            meds_to_df(rx.medicines),
            num_rows="dynamic",
            use_container_width=True,
            key="meds_editor",
        )
        rx = rx.model_copy(update={"medicines": df_to_meds(meds_df)})

        st.write("**Advice**")
        for field in ("diet", "exercise", "sleep", "other"):
            value = st.text_input(field.capitalize(), value=getattr(rx.advice, field) or "")
            rx = set_advice(rx, field, value.strip() or None)

        followup = st.text_input("Follow-up date (YYYY-MM-DD)", value=rx.followup_date or "")
        rx = set_field(rx, "followup_date", followup.strip() or None)

        st.session_state.prescription = rx

        if st.button("🖨️ Preview printable prescription"):
            try:
                st.session_state.html = api_post("/ai/render", {"prescription": rx.model_dump()}).text
            except Exception as e:
                st.error(str(e))

        if st.session_state.html:
            components.html(st.session_state.html, height=700, scrolling=True)
            st.download_button(
                "⬇️ Download HTML",
                data=st.session_state.html,
                file_name="prescription.html",
                mime="text/html",
            )

st.divider()
with st.expander("Raw JSON"):
    if st.session_state.prescription is not None:
        st.json(st.session_state.prescription.model_dump())
    else:
        st.caption("No prescription yet.")
