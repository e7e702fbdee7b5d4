"""
Result models for mediated requests.
"""

from dataclasses import dataclass
from enum import Enum

DENIAL_PREFIX = "denied: "


class MediationOutcome(str, Enum):
    """How a mediated request was resolved."""
    DENIED = "denied"
    CACHE_HIT = "cache_hit"
    DELEGATED = "delegated"


@dataclass(frozen=True)
class MediationResult:
    """Result of a single mediated request."""
    request_key: str
    response: str
    outcome: MediationOutcome
    duration_ms: float = 0.0

    @property
    def denied(self) -> bool:
        return self.outcome == MediationOutcome.DENIED

    @property
    def cache_hit(self) -> bool:
        return self.outcome == MediationOutcome.CACHE_HIT


def denial_response(request_key: str) -> str:
    """Textual response returned for a request the admission policy rejects."""
    return f"{DENIAL_PREFIX}{request_key}"
