from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class BaseProvider(ABC):
    """Contract for one concrete implementation of a capability."""

    name: str

    @abstractmethod
    def invoke(self, payload: Any, timeout_seconds: float) -> Any:
        """Run the capability for ``payload``.

        Args:
            payload: Capability-specific input dataclass.
            timeout_seconds: Budget for any network call the provider makes.

        Returns:
            The capability value (text, entity list, RiskAnalysis, ...).

        Raises:
            ProviderFailure: on any failure, including an unusable response.
        """


class FallbackProvider(BaseProvider):
    """Deterministic, dependency-free last tier of a capability chain."""

    def __init__(self, name: str, function: Callable[[Any], Any]) -> None:
        self.name = name
        self._function = function

    def invoke(self, payload: Any, timeout_seconds: float) -> Any:
        _ = timeout_seconds
        return self._function(payload)
