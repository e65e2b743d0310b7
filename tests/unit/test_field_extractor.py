from simplymedi.fields.extractor import MAX_FINDINGS, extract_fields
from simplymedi.fields.models import LabFinding, StructuredFields

SAMPLE_REPORT = """City Diagnostics Laboratory
Patient Name: John Smith Age: 45 years
Gender: Male
Report Date: 12/03/2024
Doctor: Dr. Priya Raman
Hemoglobin: 13.5 g/dL
Total Cholesterol: 220 mg/dL (HIGH - Normal is below 200)
Impression: Mild dyslipidemia
"""


class TestExtractFields:
    def test_captures_demographics(self) -> None:
        fields = extract_fields(SAMPLE_REPORT)

        assert fields.patient_name == "John Smith"
        assert fields.age == 45
        assert fields.gender == "Male"
        assert fields.report_date == "12/03/2024"
        assert fields.doctor_name == "Dr. Priya Raman"
        assert fields.diagnosis == "Mild dyslipidemia"

    def test_captures_lab_rows(self) -> None:
        fields = extract_fields(SAMPLE_REPORT)

        assert LabFinding("Hemoglobin", "13.5", "g/dL") in fields.findings
        assert "Total Cholesterol: 220 mg/dL" in fields.key_findings

    def test_single_cholesterol_line(self) -> None:
        fields = extract_fields("Total Cholesterol: 220 mg/dL (HIGH - Normal is below 200)")

        assert fields.key_findings == ["Total Cholesterol: 220 mg/dL"]
        assert fields.patient_name is None

    def test_bulleted_rows_are_captured(self) -> None:
        fields = extract_fields("• Glucose 110 mg/dL\n• Creatinine 1.1 mg/dL")

        assert fields.key_findings == ["Glucose: 110 mg/dL", "Creatinine: 1.1 mg/dL"]

    def test_findings_are_capped(self) -> None:
        text = "\n".join(f"Marker{chr(65 + i)}x: {i + 1} mg/dL" for i in range(MAX_FINDINGS + 5))

        assert len(extract_fields(text).findings) == MAX_FINDINGS

    def test_dates_are_not_lab_rows(self) -> None:
        assert extract_fields("Report Date: 12/03/2024").findings == []

    def test_short_labels_are_ignored(self) -> None:
        assert extract_fields("Hb: 13 g/dL").findings == []

    def test_empty_text_yields_empty_fields(self) -> None:
        assert extract_fields("") == StructuredFields()
        assert extract_fields(None) == StructuredFields()

    def test_prose_without_fields(self) -> None:
        fields = extract_fields("the patient was seen today and is doing well")

        assert fields.findings == []
        assert fields.age is None


class TestStructuredFields:
    def test_to_dict_drops_missing_values(self) -> None:
        fields = StructuredFields(age=70, findings=[LabFinding("Glucose", "110", "mg/dL")])

        assert fields.to_dict() == {"age": 70, "key_findings": ["Glucose: 110 mg/dL"]}

    def test_searchable_text_includes_values_and_findings(self) -> None:
        fields = StructuredFields(
            diagnosis="Severe anemia", findings=[LabFinding("Hemoglobin", "7.0", "g/dL")]
        )

        text = fields.searchable_text()

        assert "Severe anemia" in text
        assert "Hemoglobin: 7.0 g/dL" in text
