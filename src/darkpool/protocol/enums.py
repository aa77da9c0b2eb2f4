from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "validation_error"
    LEAF_NOT_FOUND = "leaf_not_found"
    PROOF_GENERATION_ERROR = "proof_generation_error"
    PROOF_VERIFICATION_ERROR = "proof_verification_error"
    INTERNAL_ERROR = "internal_error"


class OrderSide(str, Enum):
    """
    Direction of the order relative to token_in.

    SELL pays token_in and needs the market price of token_in to be at
    least the target. BUY needs the market price to be at most the target.
    """
    SELL = "sell"
    BUY = "buy"


class ProverMode(str, Enum):
    LOCAL = "local"
