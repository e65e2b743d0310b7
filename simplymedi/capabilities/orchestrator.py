"""Provider cascade engine shared by every AI-backed capability."""

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from simplymedi.capabilities.base import BaseProvider, FallbackProvider
from simplymedi.capabilities.exceptions import (
    CapabilityConfigurationError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from simplymedi.capabilities.models import (
    Capability,
    CapabilityResult,
    MedicalEntity,
    ProviderAttempt,
)
from simplymedi.logging.logger import Log


class CapabilityChain:
    """Ordered providers for one capability; the last one must be deterministic."""

    def __init__(
        self,
        capability: Capability,
        providers: Sequence[BaseProvider],
        timeout_seconds: float,
    ) -> None:
        last = providers[-1] if providers else None
        if not isinstance(last, FallbackProvider):
            raise CapabilityConfigurationError(
                f"Chain for '{capability.value}' must end with a deterministic fallback provider"
            )
        self.capability = capability
        self._fallback = last
        self.providers = list(providers)
        self.timeout_seconds = timeout_seconds

    @property
    def fallback(self) -> FallbackProvider:
        return self._fallback

    @property
    def provider_names(self) -> list[str]:
        return [provider.name for provider in self.providers]


def is_usable(value: Any) -> bool:
    """Reject answers that carry nothing: None or blank text."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _confidence(value: Any) -> float | None:
    if isinstance(value, list) and value and all(isinstance(v, MedicalEntity) for v in value):
        return sum(entity.confidence for entity in value) / len(value)
    return None


class CapabilityOrchestrator:
    """Invokes a capability by walking its chain until one provider succeeds.

    Every provider except the deterministic tier runs on a worker thread and is
    abandoned once its chain timeout elapses; the cascade then moves on. No
    provider is retried.
    """

    def __init__(self, chains: Mapping[Capability, CapabilityChain], max_workers: int = 8) -> None:
        self._chains = dict(chains)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="capability",
        )

    def invoke(self, capability: Capability, payload: Any) -> CapabilityResult:
        chain = self._chain(capability)
        failures: list[ProviderAttempt] = []

        for tier, provider in enumerate(chain.providers):
            if isinstance(provider, FallbackProvider):
                return self._run_fallback(chain, payload, tier, failures)
            try:
                value = self._call(provider, payload, chain.timeout_seconds)
                if not is_usable(value):
                    raise ProviderResponseError("provider returned an empty result")
            except Exception as exc:
                failures.append(ProviderAttempt(provider=provider.name, error=str(exc)))
                Log.warning(
                    f"Provider failed for {capability.value}, trying next tier",
                    provider=provider.name,
                    tier=tier,
                    error=str(exc),
                )
                continue

            Log.info(f"Capability {capability.value} answered", provider=provider.name, tier=tier)
            return CapabilityResult(
                capability=capability,
                value=value,
                provider=provider.name,
                used_fallback=tier > 0,
                tier=tier,
                confidence=_confidence(value),
                failures=failures,
            )

        raise CapabilityConfigurationError(f"Chain for '{capability.value}' has no fallback")

    def fallback(
        self,
        capability: Capability,
        payload: Any,
        reason: str | None = None,
    ) -> CapabilityResult:
        """Answer straight from the deterministic tier, skipping every provider."""
        chain = self._chain(capability)
        failures = [ProviderAttempt(provider="orchestrator", error=reason)] if reason else []
        return self._run_fallback(chain, payload, len(chain.providers) - 1, failures)

    def active_providers(self, capability: Capability) -> list[str]:
        return self._chain(capability).provider_names

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _chain(self, capability: Capability) -> CapabilityChain:
        chain = self._chains.get(capability)
        if chain is None:
            raise CapabilityConfigurationError(f"No chain configured for '{capability.value}'")
        return chain

    def _call(self, provider: BaseProvider, payload: Any, timeout_seconds: float) -> Any:
        future = self._executor.submit(provider.invoke, payload, timeout_seconds)
        try:
            return future.result(timeout=timeout_seconds)
        except FutureTimeoutError as exc:
            future.cancel()
            raise ProviderTimeoutError(
                f"{provider.name} did not answer within {timeout_seconds}s"
            ) from exc

    def _run_fallback(
        self,
        chain: CapabilityChain,
        payload: Any,
        tier: int,
        failures: list[ProviderAttempt],
    ) -> CapabilityResult:
        provider = chain.fallback
        value = provider.invoke(payload, chain.timeout_seconds)
        Log.warning(
            f"Capability {chain.capability.value} answered by deterministic tier",
            provider=provider.name,
            failed=len(failures),
        )
        return CapabilityResult(
            capability=chain.capability,
            value=value,
            provider=provider.name,
            used_fallback=True,
            tier=tier,
            confidence=_confidence(value),
            failures=failures,
        )
