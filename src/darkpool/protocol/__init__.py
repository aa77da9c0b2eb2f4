from .enums import ErrorCode, OrderSide, ProverMode
from .errors import (
    DarkPoolError,
    ValidationError,
    LeafNotFoundError,
    ProofGenerationError,
    ProofVerificationError,
)

__all__ = [
    "ErrorCode",
    "OrderSide",
    "ProverMode",
    "DarkPoolError",
    "ValidationError",
    "LeafNotFoundError",
    "ProofGenerationError",
    "ProofVerificationError",
]
