from typing import Optional
from .enums import ErrorCode


class DarkPoolError(Exception):
    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or ErrorCode.INTERNAL_ERROR


class ValidationError(DarkPoolError):
    """Raised when an input value has the wrong shape or range."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.VALIDATION_ERROR)


class LeafNotFoundError(DarkPoolError):
    """Raised when a proof is requested for a leaf the accumulator does not hold."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.LEAF_NOT_FOUND)


class ProofGenerationError(DarkPoolError):
    """Raised when a backend or remote prover fails to produce an artifact."""

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message, code or ErrorCode.PROOF_GENERATION_ERROR)


class ProofVerificationError(DarkPoolError):
    """Raised when an artifact cannot be decoded or its signature does not check out."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PROOF_VERIFICATION_ERROR)
