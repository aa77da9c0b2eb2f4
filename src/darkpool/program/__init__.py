"""
Order program: the deterministic computation run inside the execution
backend, plus its input/output wire forms.
"""

from darkpool.program.order_program import (
    PROGRAM_ID,
    PROGRAM_VERSION,
    PrivateInputs,
    PublicInputs,
    ProgramInputs,
    PublicOutputs,
    build_program_inputs,
    run_order_program,
    estimate_cycles,
)

__all__ = [
    "PROGRAM_ID",
    "PROGRAM_VERSION",
    "PrivateInputs",
    "PublicInputs",
    "ProgramInputs",
    "PublicOutputs",
    "build_program_inputs",
    "run_order_program",
    "estimate_cycles",
]
