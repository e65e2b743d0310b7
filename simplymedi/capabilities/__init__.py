from simplymedi.capabilities.factory import CapabilityOrchestratorFactory
from simplymedi.capabilities.models import Capability, CapabilityResult
from simplymedi.capabilities.orchestrator import CapabilityChain, CapabilityOrchestrator

__all__ = [
    "Capability",
    "CapabilityChain",
    "CapabilityOrchestrator",
    "CapabilityOrchestratorFactory",
    "CapabilityResult",
]
