from collections.abc import Callable
from typing import Any, ClassVar

from simplymedi.capabilities import fallbacks
from simplymedi.capabilities.base import BaseProvider, FallbackProvider
from simplymedi.capabilities.exceptions import CapabilityConfigurationError
from simplymedi.capabilities.huggingface_client_adapter import HuggingFaceClientAdapter
from simplymedi.capabilities.models import Capability
from simplymedi.capabilities.openai_client_adapter import OpenAIClientAdapter
from simplymedi.capabilities.orchestrator import CapabilityChain, CapabilityOrchestrator
from simplymedi.capabilities.providers import (
    CompletionProvider,
    HuggingFaceChatProvider,
    HuggingFaceEntityProvider,
    HuggingFaceSimplifyProvider,
)
from simplymedi.capabilities.tasks import TASKS
from simplymedi.config.settings import Settings
from simplymedi.logging.logger import Log

FALLBACK_PROVIDER_NAME = "local"


class CapabilityOrchestratorFactory:
    """Builds one provider chain per capability from application settings."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str | None]] = {
        "openai": None,
        "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "perplexity": "https://api.perplexity.ai",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
    }

    HUGGINGFACE_CAPABILITIES: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.SIMPLIFY, Capability.EXTRACT_ENTITIES, Capability.CHAT}
    )

    @classmethod
    def create(cls, settings: Settings) -> CapabilityOrchestrator:
        """Create an orchestrator whose chains skip providers without an API key."""
        clients: dict[str, Any] = {}
        chains = {
            capability: CapabilityChain(
                capability,
                [
                    *cls._providers(capability, names, settings, clients),
                    FallbackProvider(FALLBACK_PROVIDER_NAME, cls._fallback(capability, settings)),
                ],
                timeout_seconds=cls._timeout_seconds(capability, settings),
            )
            for capability, names in cls._chain_names(settings).items()
        }
        return CapabilityOrchestrator(chains, max_workers=max(4, settings.max_concurrent_jobs * 2))

    @classmethod
    def _chain_names(cls, settings: Settings) -> dict[Capability, list[str]]:
        return {
            Capability.SIMPLIFY: settings.simplify_providers,
            Capability.EXTRACT_ENTITIES: settings.entity_providers,
            Capability.ANALYZE_RISK: settings.risk_providers,
            Capability.RECOMMEND: settings.recommend_providers,
            Capability.SUMMARIZE: settings.summarize_providers,
            Capability.CHAT: settings.chat_providers,
        }

    @classmethod
    def _providers(
        cls,
        capability: Capability,
        names: list[str],
        settings: Settings,
        clients: dict[str, Any],
    ) -> list[BaseProvider]:
        providers: list[BaseProvider] = []
        for raw_name in names:
            name = raw_name.strip().lower()
            if not cls._api_key(name, settings):
                Log.info(f"Skipping {name} for {capability.value}: no API key configured")
                continue
            if name == "huggingface":
                providers.append(cls._huggingface_provider(capability, settings, clients))
                continue
            client = clients.get(name)
            if client is None:
                client = OpenAIClientAdapter(
                    api_key=cls._api_key(name, settings),
                    timeout_seconds=cls._timeout_seconds(capability, settings),
                    base_url=cls.OPENAI_COMPATIBLE_BASE_URLS[name],
                )
                clients[name] = client
            providers.append(
                CompletionProvider(
                    name=name,
                    client=client,
                    model=cls._model_name(name, settings),
                    task=TASKS[capability](),
                )
            )
        return providers

    @classmethod
    def _huggingface_provider(
        cls,
        capability: Capability,
        settings: Settings,
        clients: dict[str, Any],
    ) -> BaseProvider:
        if capability not in cls.HUGGINGFACE_CAPABILITIES:
            raise CapabilityConfigurationError(
                f"huggingface cannot serve '{capability.value}'. "
                f"Supported: {sorted(c.value for c in cls.HUGGINGFACE_CAPABILITIES)}"
            )
        client = clients.get("huggingface")
        if client is None:
            client = HuggingFaceClientAdapter(
                api_key=settings.huggingface_api_key,
                base_url=settings.huggingface_base_url,
            )
            clients["huggingface"] = client
        if capability == Capability.EXTRACT_ENTITIES:
            return HuggingFaceEntityProvider(client=client, model=settings.huggingface_ner_model)
        if capability == Capability.SIMPLIFY:
            return HuggingFaceSimplifyProvider(client=client, model=settings.huggingface_chat_model)
        return HuggingFaceChatProvider(client=client, model=settings.huggingface_chat_model)

    @classmethod
    def _api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "gemini": settings.gemini_api_key,
            "perplexity": settings.perplexity_api_key,
            "openai": settings.openai_api_key,
            "openrouter": settings.openrouter_api_key,
            "groq": settings.groq_api_key,
            "huggingface": settings.huggingface_api_key,
        }
        if provider not in key_map:
            supported = sorted(key_map)
            raise CapabilityConfigurationError(
                f"Unknown capability provider '{provider}'. Choose from: {supported}"
            )
        return key_map[provider].strip()

    @classmethod
    def _model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "gemini": settings.gemini_model_name,
            "perplexity": settings.perplexity_model_name,
            "openai": settings.openai_model_name,
            "openrouter": settings.openrouter_model_name,
            "groq": settings.groq_model_name,
        }
        return key_map[provider]

    @classmethod
    def _timeout_seconds(cls, capability: Capability, settings: Settings) -> float:
        if capability == Capability.CHAT:
            return settings.chat_timeout_seconds
        return settings.document_capability_timeout_seconds

    @classmethod
    def _fallback(cls, capability: Capability, settings: Settings) -> Callable[[Any], Any]:
        if capability == Capability.ANALYZE_RISK:
            return fallbacks.RiskKeywordScanner(
                settings.high_risk_keywords,
                settings.medium_risk_keywords,
            )
        functions: dict[Capability, Callable[[Any], Any]] = {
            Capability.SIMPLIFY: fallbacks.simplify,
            Capability.EXTRACT_ENTITIES: fallbacks.extract_entities,
            Capability.RECOMMEND: fallbacks.recommend,
            Capability.SUMMARIZE: fallbacks.summarize,
            Capability.CHAT: fallbacks.chat,
        }
        return functions[capability]
