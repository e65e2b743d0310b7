from typing import Any
from unittest.mock import MagicMock

import pytest

from simplymedi.api.exceptions import ReportNotFoundError, ValidationFailure
from simplymedi.api.knowledge import KnowledgeService
from simplymedi.database.models import ReportRecord, SimplifiedReportRecord
from simplymedi.retrieval.models import (
    KnowledgeSearchResult,
    RecommendationAnswer,
    RecommendationQuery,
    SourceTier,
)


def _report(**overrides: Any) -> ReportRecord:
    values: dict[str, Any] = {
        "id": 5,
        "user_id": 10,
        "file_name": "5-lipids.txt",
        "storage_key": "reports/5-lipids.txt",
        "file_type": "txt",
        "mime_type": "text/plain",
        "file_size_bytes": 60,
        "processing_status": "completed",
        "report_type": "blood_test",
        "extracted_text": "Total Cholesterol: 220 mg/dL",
        "metadata": {"profile": {"gender": "male"}},
    }
    values.update(overrides)
    return ReportRecord(**values)


def _answer() -> RecommendationAnswer:
    return RecommendationAnswer(
        follow_up_care="See your doctor",
        lifestyle_modifications="Walk daily",
        monitoring="",
        urgent_care="",
        references="",
        full_response="1. See your doctor 2. Walk daily",
        source_tier=SourceTier.RETRIEVAL,
        provider="rag-workflow",
        used_fallback=False,
        sources=["guideline"],
        confidence=0.8,
    )


def _make_service(
    report: ReportRecord | None = None,
) -> tuple[KnowledgeService, MagicMock, MagicMock, MagicMock]:
    router = MagicMock()
    router.recommend.return_value = _answer()
    router.search.return_value = KnowledgeSearchResult(
        success=True, query="anemia", results=[{"title": "Medical Information: anemia"}]
    )
    report_repo = MagicMock()
    report_repo.find_by_id.return_value = report or _report()
    simplified_repo = MagicMock()
    simplified_repo.find_by_report_id.return_value = None
    service = KnowledgeService(router, report_repo, simplified_repo, default_language="hindi")
    return service, router, report_repo, simplified_repo


class TestSearch:
    def test_passes_filters_and_default_language(self) -> None:
        service, router, _reports, _artifacts = _make_service()

        response = service.search({"query": "anemia", "category": "blood"})

        query, context = router.search.call_args[0]
        assert query == "anemia"
        assert context.language == "hindi"
        assert router.search.call_args.kwargs == {"category": "blood", "audience": "patient"}
        assert response.success is True
        assert response.total_results == 1

    def test_blank_query_is_rejected(self) -> None:
        service, router, _reports, _artifacts = _make_service()

        with pytest.raises(ValidationFailure):
            service.search({"query": ""})

        router.search.assert_not_called()


class TestRecommendations:
    def test_builds_query_from_report(self) -> None:
        service, router, _reports, simplified_repo = _make_service()
        simplified_repo.find_by_report_id.return_value = SimplifiedReportRecord(
            id=1,
            report_id=5,
            original_text="",
            simplified_text="",
            language="english",
            risk_level="high",
            summary="",
        )

        response = service.recommendations(5, {"symptoms": ["fatigue"]})

        query, context = router.recommend.call_args[0]
        assert isinstance(query, RecommendationQuery)
        assert query.report_ref == "5"
        assert query.report_type == "blood_test"
        assert query.fields.key_findings == ["Total Cholesterol: 220 mg/dL"]
        assert query.symptoms == ["fatigue"]
        assert query.profile == {"gender": "male"}
        assert query.risk_level == "high"
        assert context.language == "english"
        assert response.recommendations["followUpCare"] == "See your doctor"
        assert response.source == "retrieval"
        assert response.sources == ["guideline"]

    def test_request_profile_replaces_stored_profile(self) -> None:
        service, router, _reports, _artifacts = _make_service()

        service.recommendations(5, {"profile": {"ageGroup": "senior"}})

        assert router.recommend.call_args[0][0].profile == {"ageGroup": "senior"}

    def test_unprocessed_report_is_rejected(self) -> None:
        service, router, _reports, _artifacts = _make_service(
            _report(processing_status="uploaded", extracted_text=None)
        )

        with pytest.raises(ValidationFailure, match="not been processed"):
            service.recommendations(5)

        router.recommend.assert_not_called()

    def test_missing_report_propagates(self) -> None:
        service, _router, report_repo, _artifacts = _make_service()
        report_repo.find_by_id.side_effect = ReportNotFoundError("Report 9 not found")

        with pytest.raises(ReportNotFoundError):
            service.recommendations(9)
