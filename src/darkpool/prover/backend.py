"""
Execution backends.

A backend runs the order program on a ProgramInputs value and returns
committed public values plus an opaque artifact that lets a third party
check them. The production backend is a zkVM prover and lives outside
this package; LocalAttestationBackend runs the program in-process and
signs the public values with an Ed25519 key.

Artifact wire form (canonical JSON, then UTF-8):

    {"keyId": ..., "programId": hex, "publicValues": hex,
     "signature": base64, "version": 1}
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from darkpool.core.settings import ProverSettings
from darkpool.program.order_program import (
    PROGRAM_ID,
    ProgramInputs,
    PublicOutputs,
    estimate_cycles,
    run_order_program,
)
from darkpool.protocol.enums import ProverMode
from darkpool.protocol.errors import (
    DarkPoolError,
    ProofGenerationError,
    ProofVerificationError,
)
from darkpool.utils.json import canonical_json_bytes

from .signing import AttestationSigner, AttestationVerifier

logger = logging.getLogger(__name__)

ARTIFACT_VERSION = 1
ATTESTATION_DOMAIN = b"darkpool-attestation-v1"


# ===========================================================================
# Backend Protocol
# ===========================================================================


@dataclass(frozen=True)
class ExecutionReport:
    """Result of executing the program without producing an artifact."""
    outputs: PublicOutputs
    public_values: bytes
    cycles: int


@dataclass(frozen=True)
class ProofArtifact:
    """
    Signed public values.

    Attributes:
        program_id: Identifier of the program that produced the values
        public_values: Positional committed values
        signature: Ed25519 signature over the attestation payload
        key_id: Fingerprint of the signing key
    """
    program_id: bytes
    public_values: bytes
    signature: bytes
    key_id: str

    def signing_payload(self) -> bytes:
        return attestation_payload(self.program_id, self.public_values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": ARTIFACT_VERSION,
            "programId": self.program_id.hex(),
            "publicValues": self.public_values.hex(),
            "signature": base64.b64encode(self.signature).decode("ascii"),
            "keyId": self.key_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofArtifact":
        if data.get("version") != ARTIFACT_VERSION:
            raise ProofVerificationError(f"Unsupported artifact version: {data.get('version')!r}")
        try:
            return cls(
                program_id=bytes.fromhex(data["programId"]),
                public_values=bytes.fromhex(data["publicValues"]),
                signature=base64.b64decode(data["signature"], validate=True),
                key_id=str(data["keyId"]),
            )
        except (KeyError, TypeError, ValueError, binascii.Error) as e:
            raise ProofVerificationError(f"Malformed artifact: {e}") from None

    def to_bytes(self) -> bytes:
        return canonical_json_bytes(self.to_dict())

    @classmethod
    def from_bytes(cls, data: bytes) -> "ProofArtifact":
        try:
            decoded = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise ProofVerificationError("Artifact is not valid JSON") from None
        if not isinstance(decoded, dict):
            raise ProofVerificationError("Artifact must be a JSON object")
        return cls.from_dict(decoded)


def attestation_payload(program_id: bytes, public_values: bytes) -> bytes:
    return ATTESTATION_DOMAIN + program_id + public_values


class ExecutionBackend(Protocol):
    """
    Protocol for order program backends.

    Implementations MUST:
    - Commit bit-identical public values for identical inputs
    - Never reveal private inputs through artifacts or errors
    """

    def execute(self, inputs: ProgramInputs) -> ExecutionReport:
        """Run the program only."""
        ...

    def prove(self, inputs: ProgramInputs) -> ProofArtifact:
        """Run the program and produce an artifact."""
        ...

    def verify(self, artifact_bytes: bytes) -> PublicOutputs:
        """Check an artifact and return the public values it carries."""
        ...


# ===========================================================================
# Local backend
# ===========================================================================


class LocalAttestationBackend:
    """
    In-process backend for development and tests.

    Runs the order program directly and signs the public values. Anyone
    holding the signing key can forge artifacts; use it only where the
    operator is trusted.

    Usage:
        backend = LocalAttestationBackend(AttestationSigner.generate())
        artifact = backend.prove(inputs)
        outputs = backend.verify(artifact.to_bytes())
    """

    def __init__(
        self,
        signer: AttestationSigner,
        extended: bool = True,
        verifier: Optional[AttestationVerifier] = None,
    ) -> None:
        self._signer = signer
        self._extended = extended
        self._verifier = verifier or AttestationVerifier()
        self._verifier.add_from_signer(signer)

    @property
    def key_id(self) -> str:
        return self._signer.key_id

    @property
    def extended(self) -> bool:
        return self._extended

    def execute(self, inputs: ProgramInputs) -> ExecutionReport:
        outputs = run_order_program(inputs.private, inputs.public, extended=self._extended)
        return ExecutionReport(
            outputs=outputs,
            public_values=outputs.encode(),
            cycles=estimate_cycles(inputs.private, extended=self._extended),
        )

    def prove(self, inputs: ProgramInputs) -> ProofArtifact:
        report = self.execute(inputs)
        try:
            signature = self._signer.sign(attestation_payload(PROGRAM_ID, report.public_values))
        except Exception as e:
            raise ProofGenerationError(f"Signing failed: {e}") from e

        logger.debug("Attested public values (key_id=%s, cycles=%d)", self.key_id, report.cycles)
        return ProofArtifact(
            program_id=PROGRAM_ID,
            public_values=report.public_values,
            signature=signature,
            key_id=self.key_id,
        )

    def verify(self, artifact_bytes: bytes) -> PublicOutputs:
        """
        Verify an artifact produced by a known key.

        Raises:
            ProofVerificationError: On malformed artifact, foreign program,
                unknown key or bad signature
        """
        artifact = ProofArtifact.from_bytes(artifact_bytes)

        if artifact.program_id != PROGRAM_ID:
            raise ProofVerificationError("Artifact was produced by a different program")
        if not self._verifier.has_key(artifact.key_id):
            raise ProofVerificationError(f"Unknown attestation key: {artifact.key_id}")
        if not self._verifier.verify(artifact.signing_payload(), artifact.signature, artifact.key_id):
            raise ProofVerificationError("Invalid attestation signature")

        try:
            return PublicOutputs.decode(artifact.public_values)
        except DarkPoolError as e:
            raise ProofVerificationError(str(e)) from None


def create_backend(settings: ProverSettings) -> ExecutionBackend:
    """
    Build the backend selected by settings.

    The local backend uses the configured PEM key, or an ephemeral key
    when none is set (artifacts then die with the process).
    """
    if settings.mode is not ProverMode.LOCAL:
        raise ProofGenerationError(f"Unsupported prover mode: {settings.mode}")

    if settings.signing_key_file:
        signer = AttestationSigner.from_pem_file(settings.signing_key_file)
    else:
        logger.warning("No DARKPOOL_SIGNING_KEY_FILE set; using an ephemeral attestation key")
        signer = AttestationSigner.generate()

    logger.info("Local attestation backend ready (key_id=%s)", signer.key_id)
    return LocalAttestationBackend(signer, extended=settings.extended_outputs)
