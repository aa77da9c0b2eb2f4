"""
Dark Pool proof service.

Thin HTTP layer over an execution backend:

    client → POST /proof/generate → backend.prove() → artifact + public values
"""

from .app import create_app, run
from .models import ProofGenerationRequest, ProofResponse, ProofVerificationResponse
from .stats import ProofStats, StatsSnapshot

__all__ = [
    "create_app",
    "run",
    "ProofGenerationRequest",
    "ProofResponse",
    "ProofVerificationResponse",
    "ProofStats",
    "StatsSnapshot",
]
