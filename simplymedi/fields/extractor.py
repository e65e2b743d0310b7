"""Pattern-based extraction of candidate fields from report text.

Each field has one independent matcher; a miss simply leaves the field unset.
Lab rows ("Hemoglobin: 13.5 g/dL") are captured by a looping matcher capped at
``MAX_FINDINGS`` rows.
"""

import re

from simplymedi.fields.models import LabFinding, StructuredFields

MAX_FINDINGS = 10

_PATIENT_NAME = re.compile(
    r"(?:Patient[ \t]+Name|Name)[ \t:]+([A-Za-z][A-Za-z \t.]+?)(?=[ \t]+Age|[ \t]+Gender|\n|$)",
    re.IGNORECASE,
)
_AGE = re.compile(r"(?:Age/Sex|Age)[ \t:]+(\d{1,3})[ \t]*(?:years|yrs)?", re.IGNORECASE)
_GENDER = re.compile(r"(?:Sex|Gender)[ \t:]+(\w+)", re.IGNORECASE)
_REPORT_DATE = re.compile(
    r"(?:Date[ \t]+of[ \t]+Examination|Report[ \t]+Date|Date)[ \t:]+"
    r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})",
    re.IGNORECASE,
)
_DOCTOR_NAME = re.compile(
    r"(?:Consulting[ \t]+Physician|Doctor|Physician)[ \t:]+([A-Za-z][A-Za-z \t.,]+)",
    re.IGNORECASE,
)
_DIAGNOSIS = re.compile(
    r"(?:Provisional[ \t]+Diagnosis|Diagnosis|Impression)[ \t:]+([^\n]+)",
    re.IGNORECASE,
)
_LAB_ROW = re.compile(
    r"^[ \t]*(?:•[ \t]*)?([A-Z][a-zA-Z \t]+?)[ \t:]+(\d+\.?\d*)[ \t]*([a-zA-Z%][a-zA-Z/% \t]*)",
    re.MULTILINE,
)


def extract_fields(text: str | None) -> StructuredFields:
    """Return every field that can be recognized in ``text``."""
    if not text:
        return StructuredFields()

    age = _first(_AGE, text)
    return StructuredFields(
        patient_name=_first(_PATIENT_NAME, text),
        age=int(age) if age is not None else None,
        gender=_first(_GENDER, text),
        report_date=_first(_REPORT_DATE, text),
        doctor_name=_first(_DOCTOR_NAME, text),
        diagnosis=_first(_DIAGNOSIS, text),
        findings=_findings(text),
    )


def _first(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def _findings(text: str) -> list[LabFinding]:
    findings: list[LabFinding] = []
    for match in _LAB_ROW.finditer(text):
        if len(findings) >= MAX_FINDINGS:
            break
        name, value, unit = (group.strip() for group in match.groups())
        # Short labels and long "units" are prose, not lab rows.
        if 3 < len(name) < 50 and len(unit) < 20:
            findings.append(LabFinding(name=name, value=value, unit=unit))
    return findings
