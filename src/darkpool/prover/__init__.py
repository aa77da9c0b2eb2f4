from .backend import (
    ExecutionBackend,
    ExecutionReport,
    ProofArtifact,
    LocalAttestationBackend,
    create_backend,
)
from .signing import AttestationSigner, AttestationVerifier

__all__ = [
    "ExecutionBackend",
    "ExecutionReport",
    "ProofArtifact",
    "LocalAttestationBackend",
    "create_backend",
    "AttestationSigner",
    "AttestationVerifier",
]
