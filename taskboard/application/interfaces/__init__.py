"""Application interfaces (ports): upstream, cache and absence protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from taskboard.infrastructure or taskboard.api.
"""

from taskboard.application.interfaces.services import (
    AbsenceInfo,
    BatchResult,
    IAbsenceProvider,
    ICacheService,
    IUpstreamClient,
    ProgressCallback,
)

__all__ = [
    "AbsenceInfo",
    "BatchResult",
    "IAbsenceProvider",
    "ICacheService",
    "IUpstreamClient",
    "ProgressCallback",
]
