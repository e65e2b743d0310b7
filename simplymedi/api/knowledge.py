import uuid
from typing import Any

from pydantic import BaseModel, ValidationError

from simplymedi.api.exceptions import ValidationFailure
from simplymedi.api.schemas import (
    KnowledgeSearchRequest,
    KnowledgeSearchResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.database.repositories.simplified_report_repository import (
    SimplifiedReportRepository,
)
from simplymedi.fields.extractor import extract_fields
from simplymedi.logging.logger import Log
from simplymedi.retrieval.models import QueryContext, RecommendationQuery
from simplymedi.retrieval.router import RetrievalQueryRouter


def _validate(schema: type[BaseModel], data: dict[str, Any]) -> Any:
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure.from_pydantic(exc) from exc


class KnowledgeService:
    """Knowledge-base search and per-report care recommendations."""

    def __init__(
        self,
        router: RetrievalQueryRouter,
        report_repo: ReportRepository,
        simplified_repo: SimplifiedReportRepository,
        default_language: str = "english",
    ) -> None:
        self._router = router
        self._report_repo = report_repo
        self._simplified_repo = simplified_repo
        self._default_language = default_language

    def search(self, data: dict[str, Any]) -> KnowledgeSearchResponse:
        """Search the knowledge base. Failure is reported, never raised.

        Raises:
            ValidationFailure: if the request is malformed.
        """
        request: KnowledgeSearchRequest = _validate(KnowledgeSearchRequest, data)
        context = QueryContext(
            user_id=request.user_id,
            session_id=request.session_id or f"search-{uuid.uuid4().hex}",
            language=request.language or self._default_language,
        )
        result = self._router.search(
            request.query, context, category=request.category, audience=request.audience
        )
        return KnowledgeSearchResponse(
            success=result.success,
            query=result.query,
            results=result.results,
            total_results=result.total_results,
            error=result.error,
        )

    def recommendations(
        self, report_id: int, data: dict[str, Any] | None = None
    ) -> RecommendationResponse:
        """Care recommendations for a report whose text has been extracted.

        Raises:
            ReportNotFoundError: if the report does not exist.
            ValidationFailure: if the request is malformed or the report has no text yet.
        """
        request: RecommendationRequest = _validate(RecommendationRequest, data or {})
        report = self._report_repo.find_by_id(report_id)
        if not report.extracted_text:
            raise ValidationFailure(
                "Report has not been processed",
                [{"field": "report_id", "message": f"report {report_id} has no extracted text"}],
            )

        artifact = self._simplified_repo.find_by_report_id(report_id)
        stored_profile = report.metadata.get("profile") or {}
        query = RecommendationQuery(
            report_ref=str(report.id),
            report_type=report.report_type,
            fields=extract_fields(report.extracted_text),
            symptoms=request.symptoms,
            profile=request.profile or (stored_profile if isinstance(stored_profile, dict) else {}),
            risk_level=artifact.risk_level if artifact is not None else None,
        )
        context = QueryContext(
            user_id=request.user_id,
            session_id=request.session_id or f"recommend-{uuid.uuid4().hex}",
            language=report.language or self._default_language,
        )

        answer = self._router.recommend(query, context)
        Log.info(
            f"Recommendations for report {report_id}",
            source=answer.source_tier.value,
            provider=answer.provider,
        )
        return RecommendationResponse(
            report_id=report.id,
            recommendations=answer.to_dict(),
            source=answer.source_tier.value,
            provider=answer.provider,
            used_fallback=answer.used_fallback,
            sources=answer.sources,
            confidence=answer.confidence,
            related_documents=answer.related_documents,
        )
