from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class LabFinding:
    """One "label: value unit" row captured from a report."""

    name: str
    value: str
    unit: str

    def __str__(self) -> str:
        return f"{self.name}: {self.value} {self.unit}".strip()


@dataclass(frozen=True)
class StructuredFields:
    """Candidate fields pulled out of raw report text. Absent fields stay None."""

    patient_name: str | None = None
    age: int | None = None
    gender: str | None = None
    report_date: str | None = None
    doctor_name: str | None = None
    diagnosis: str | None = None
    findings: list[LabFinding] = field(default_factory=list)

    @property
    def key_findings(self) -> list[str]:
        return [str(finding) for finding in self.findings]

    def to_dict(self) -> dict[str, Any]:
        data = {key: value for key, value in asdict(self).items() if key != "findings"}
        data = {key: value for key, value in data.items() if value is not None}
        data["key_findings"] = self.key_findings
        return data

    def searchable_text(self) -> str:
        """Flatten captured values into one string for keyword scans."""
        parts = [
            str(value)
            for key, value in self.to_dict().items()
            if key != "key_findings" and value is not None
        ]
        parts.extend(self.key_findings)
        return "\n".join(parts)
