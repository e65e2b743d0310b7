"""Prompt construction and response parsing for completion-based providers.

A task turns a capability input into chat messages and turns the raw model
answer back into the capability's value, raising ``ProviderResponseError``
when the answer is not usable.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from simplymedi.capabilities.exceptions import ProviderResponseError
from simplymedi.capabilities.models import (
    Capability,
    ChatInput,
    EntitiesInput,
    HealthRecommendations,
    MedicalEntity,
    RecommendInput,
    RiskAnalysis,
    RiskInput,
    RiskLevel,
    SimplifyInput,
    SummarizeInput,
)
from simplymedi.capabilities.prompt_loader import load_prompt_template

LANGUAGE_NAMES: dict[str, str] = {
    "english": "English",
    "hindi": "Hindi",
    "spanish": "Spanish",
    "french": "French",
    "german": "German",
    "chinese": "Chinese",
    "mandarin": "Chinese",
    "arabic": "Arabic",
    "bengali": "Bengali",
    "tamil": "Tamil",
    "telugu": "Telugu",
    "gujarati": "Gujarati",
    "kannada": "Kannada",
    "marathi": "Marathi",
    "punjabi": "Punjabi",
}

ENTITY_LABELS: tuple[str, ...] = ("PROBLEM", "TREATMENT", "TEST", "DRUG", "ANATOMY")
MIN_ENTITY_CONFIDENCE = 0.5


def language_name(language: str) -> str:
    return LANGUAGE_NAMES.get(language.lower(), "English")


def parse_json(raw: str) -> Any:
    """Parse a JSON answer, tolerating a surrounding Markdown code fence."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ProviderResponseError(f"Invalid JSON response: {exc}") from exc


def entities_from_records(records: list[dict[str, Any]]) -> list[MedicalEntity]:
    """Keep confident records with a known label, as MedicalEntity objects."""
    entities: list[MedicalEntity] = []
    for record in records:
        label = str(record.get("label") or record.get("entity_group") or "").upper()
        text = str(record.get("text") or record.get("word") or "").strip()
        try:
            confidence = float(record.get("confidence", record.get("score", 0.0)))
        except (TypeError, ValueError):
            continue
        if label not in ENTITY_LABELS or not text or confidence <= MIN_ENTITY_CONFIDENCE:
            continue
        entities.append(
            MedicalEntity(
                text=text,
                label=label,
                confidence=confidence,
                start=record.get("start"),
                end=record.get("end"),
            )
        )
    return entities


def _require_text(raw: str) -> str:
    text = raw.strip()
    if not text:
        raise ProviderResponseError("AI returned empty response")
    return text


class CompletionTask(ABC):
    """Contract for turning one capability into a chat-completion exchange."""

    capability: ClassVar[Capability]
    template_name: ClassVar[str]
    system_prompt: ClassVar[str] = ""
    temperature: ClassVar[float] = 0.3
    max_tokens: ClassVar[int] = 500

    def __init__(self) -> None:
        self._template = load_prompt_template(self.template_name)

    def build_messages(self, payload: Any) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.render(payload)})
        return messages

    @abstractmethod
    def render(self, payload: Any) -> str:
        """Fill the prompt template for ``payload``."""

    @abstractmethod
    def parse(self, raw: str, payload: Any) -> Any:
        """Convert the raw model answer into the capability value."""


class SimplifyTask(CompletionTask):
    capability = Capability.SIMPLIFY
    template_name = "simplify"
    max_tokens = 1000

    def render(self, payload: SimplifyInput) -> str:
        return self._template.format(
            language_name=language_name(payload.language),
            text=payload.text[:2000],
        )

    def parse(self, raw: str, payload: SimplifyInput) -> str:
        return _require_text(raw)


class EntitiesTask(CompletionTask):
    capability = Capability.EXTRACT_ENTITIES
    template_name = "entities"
    system_prompt = "You are a clinical named-entity recognizer. Answer with JSON only."
    temperature = 0.0
    max_tokens = 800

    def render(self, payload: EntitiesInput) -> str:
        return self._template.format(labels=", ".join(ENTITY_LABELS), text=payload.text[:4000])

    def parse(self, raw: str, payload: EntitiesInput) -> list[MedicalEntity]:
        parsed = parse_json(raw)
        if not isinstance(parsed, list):
            raise ProviderResponseError("Entity response must be a JSON array")
        return entities_from_records([item for item in parsed if isinstance(item, dict)])


class RiskTask(CompletionTask):
    capability = Capability.ANALYZE_RISK
    template_name = "risk"
    system_prompt = (
        "You are a medical AI that analyzes risk levels. "
        "Be conservative and prioritize patient safety."
    )
    max_tokens = 200

    _LEVEL = re.compile(r"\b(low|medium|high|critical)\b")

    def render(self, payload: RiskInput) -> str:
        return self._template.format(
            text=payload.text[:3000],
            fields=json.dumps(payload.fields.to_dict(), ensure_ascii=False),
        )

    def parse(self, raw: str, payload: RiskInput) -> RiskAnalysis:
        explanation = _require_text(raw)
        match = self._LEVEL.search(explanation.lower())
        if match is None:
            raise ProviderResponseError("Risk response names no risk level")
        return RiskAnalysis(risk_level=RiskLevel(match.group(1)), explanation=explanation)


class RecommendTask(CompletionTask):
    capability = Capability.RECOMMEND
    template_name = "recommend"
    system_prompt = (
        "Professional medical AI providing evidence-based health recommendations. "
        "Always recommend healthcare provider consultation for medical management."
    )
    temperature = 0.2
    max_tokens = 1000

    def render(self, payload: RecommendInput) -> str:
        return self._template.format(
            fields=json.dumps(payload.fields.to_dict(), indent=2, ensure_ascii=False),
            risk_level=payload.risk_level or "unknown",
            profile=json.dumps(payload.profile, indent=2, ensure_ascii=False, default=str),
        )

    def parse(self, raw: str, payload: RecommendInput) -> HealthRecommendations:
        parsed = parse_json(raw)
        if not isinstance(parsed, dict):
            raise ProviderResponseError("Recommendation response must be a JSON object")
        recommendations = HealthRecommendations(
            dietary=_string_list(parsed.get("dietary")),
            lifestyle=_string_list(parsed.get("lifestyle")),
            exercise=_string_list(parsed.get("exercise")),
            follow_up_actions=_string_list(parsed.get("followUpActions")),
            warning_signs_to_watch=_string_list(parsed.get("warningSignsToWatch")),
        )
        if recommendations.is_empty():
            raise ProviderResponseError("Recommendation response has no entries")
        return recommendations


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


class SummarizeTask(CompletionTask):
    capability = Capability.SUMMARIZE
    template_name = "summarize"
    system_prompt = "You are a medical AI that creates brief, patient-friendly report summaries."
    temperature = 0.5
    max_tokens = 150
    max_words: ClassVar[int] = 100

    def render(self, payload: SummarizeInput) -> str:
        source = payload.simplified_text or payload.original_text
        terms = [entity.text for entity in payload.medical_terms]
        return self._template.format(
            text=source[:500],
            terms=", ".join(terms) if terms else "none",
            max_words=self.max_words,
        )

    def parse(self, raw: str, payload: SummarizeInput) -> str:
        text = _require_text(raw)
        words = text.split()
        if len(words) > self.max_words:
            return " ".join(words[: self.max_words])
        return text


class ChatTask(CompletionTask):
    capability = Capability.CHAT
    template_name = "chat"
    max_tokens = 500
    max_points: ClassVar[int] = 3
    history_turns: ClassVar[int] = 10

    def build_messages(self, payload: ChatInput) -> list[dict[str, str]]:
        messages = [{"role": "system", "content": self.render(payload)}]
        for turn in payload.history[-self.history_turns :]:
            if turn.role in ("user", "assistant") and turn.content.strip():
                messages.append({"role": turn.role, "content": turn.content.strip()[:1200]})
        messages.append({"role": "user", "content": payload.message.strip()[:2000]})
        return messages

    def render(self, payload: ChatInput) -> str:
        return "You are a professional medical AI assistant. " + self._template.format(
            language_name=language_name(payload.language),
            max_points=self.max_points,
            context=json.dumps(payload.context, ensure_ascii=False, default=str),
        )

    def parse(self, raw: str, payload: ChatInput) -> str:
        return _require_text(raw)


TASKS: dict[Capability, type[CompletionTask]] = {
    Capability.SIMPLIFY: SimplifyTask,
    Capability.EXTRACT_ENTITIES: EntitiesTask,
    Capability.ANALYZE_RISK: RiskTask,
    Capability.RECOMMEND: RecommendTask,
    Capability.SUMMARIZE: SummarizeTask,
    Capability.CHAT: ChatTask,
}

