"""
Tests for attestation signing and the local execution backend.
"""

import base64
import json

import pytest

from darkpool.core.settings import ProverSettings
from darkpool.program.order_program import PROGRAM_ID, EXTENDED_OUTPUT_LENGTH
from darkpool.protocol.errors import ProofVerificationError
from darkpool.prover.backend import (
    LocalAttestationBackend,
    ProofArtifact,
    create_backend,
)
from darkpool.prover.signing import AttestationSigner, AttestationVerifier


class TestAttestationSigning:
    """Tests for Ed25519 attestation keys."""

    def test_sign_and_verify(self):
        signer = AttestationSigner.generate()
        verifier = AttestationVerifier()
        key_id = verifier.add_from_signer(signer)

        signature = signer.sign(b"payload")

        assert key_id == signer.key_id
        assert len(signature) == 64
        assert verifier.verify(b"payload", signature, key_id)
        assert not verifier.verify(b"other", signature, key_id)

    def test_unknown_key(self):
        signer = AttestationSigner.generate()
        verifier = AttestationVerifier()

        assert not verifier.has_key(signer.key_id)
        assert not verifier.verify(b"payload", signer.sign(b"payload"), signer.key_id)

    def test_key_id_format(self):
        signer = AttestationSigner.generate()

        assert len(signer.key_id) == 16
        int(signer.key_id, 16)

    def test_pem_round_trip(self, tmp_path):
        signer = AttestationSigner.generate()
        key_file = tmp_path / "attest.pem"
        key_file.write_bytes(signer.export_private_pem())

        loaded = AttestationSigner.from_pem_file(str(key_file))
        verifier = AttestationVerifier()
        verifier.add_public_key_pem(signer.export_public_pem())

        assert loaded.key_id == signer.key_id
        assert verifier.verify(b"x", loaded.sign(b"x"), signer.key_id)

    def test_from_private_bytes_is_deterministic(self):
        a = AttestationSigner.from_private_bytes(b"\x07" * 32)
        b = AttestationSigner.from_private_bytes(b"\x07" * 32)

        assert a.key_id == b.key_id
        assert a.public_key_bytes == b.public_key_bytes


class TestLocalAttestationBackend:
    """Tests for prove/verify through the local backend."""

    @pytest.fixture
    def backend(self):
        return LocalAttestationBackend(AttestationSigner.generate())

    def test_execute(self, backend, valid_inputs):
        report = backend.execute(valid_inputs)

        assert report.outputs.is_valid is True
        assert len(report.public_values) == EXTENDED_OUTPUT_LENGTH
        assert report.cycles > 0

    def test_basic_outputs(self, valid_inputs):
        backend = LocalAttestationBackend(AttestationSigner.generate(), extended=False)

        assert backend.execute(valid_inputs).public_values == b"\x01"

    def test_prove_and_verify(self, backend, valid_inputs):
        artifact = backend.prove(valid_inputs)
        outputs = backend.verify(artifact.to_bytes())

        assert artifact.program_id == PROGRAM_ID
        assert artifact.key_id == backend.key_id
        assert outputs.is_valid is True
        assert outputs.wallet == valid_inputs.private.order.wallet

    def test_invalid_order_still_proves(self, backend, valid_inputs):
        """A failing order produces an artifact that commits is_valid=False."""
        import dataclasses

        private = dataclasses.replace(valid_inputs.private, balance=1)
        artifact = backend.prove(type(valid_inputs)(private=private, public=valid_inputs.public))

        assert backend.verify(artifact.to_bytes()).is_valid is False

    def test_artifact_has_no_private_values(self, backend, valid_inputs):
        artifact_bytes = backend.prove(valid_inputs).to_bytes()

        assert valid_inputs.private.secret.hex() not in artifact_bytes.decode("ascii")

    def test_tampered_public_values(self, backend, valid_inputs):
        data = backend.prove(valid_inputs).to_dict()
        values = bytearray(bytes.fromhex(data["publicValues"]))
        values[0] ^= 1
        data["publicValues"] = values.hex()

        with pytest.raises(ProofVerificationError):
            backend.verify(json.dumps(data).encode())

    def test_tampered_signature(self, backend, valid_inputs):
        data = backend.prove(valid_inputs).to_dict()
        signature = bytearray(base64.b64decode(data["signature"]))
        signature[0] ^= 1
        data["signature"] = base64.b64encode(bytes(signature)).decode()

        with pytest.raises(ProofVerificationError):
            backend.verify(json.dumps(data).encode())

    def test_foreign_key(self, backend, valid_inputs):
        other = LocalAttestationBackend(AttestationSigner.generate())
        artifact = other.prove(valid_inputs)

        with pytest.raises(ProofVerificationError):
            backend.verify(artifact.to_bytes())

    def test_shared_verifier_accepts_both_keys(self, valid_inputs):
        verifier = AttestationVerifier()
        first = LocalAttestationBackend(AttestationSigner.generate(), verifier=verifier)
        second = LocalAttestationBackend(AttestationSigner.generate(), verifier=verifier)

        assert first.verify(second.prove(valid_inputs).to_bytes()).is_valid is True

    def test_foreign_program(self, backend, valid_inputs):
        artifact = backend.prove(valid_inputs)
        data = artifact.to_dict()
        data["programId"] = ("00" * 32)

        with pytest.raises(ProofVerificationError):
            backend.verify(json.dumps(data).encode())

    @pytest.mark.parametrize(
        "payload",
        [b"not json", b"[]", b'{"version": 2}', b'{"version": 1, "programId": "zz"}'],
    )
    def test_malformed_artifact(self, backend, payload):
        with pytest.raises(ProofVerificationError):
            backend.verify(payload)

    def test_artifact_round_trip(self, backend, valid_inputs):
        artifact = backend.prove(valid_inputs)

        assert ProofArtifact.from_bytes(artifact.to_bytes()) == artifact


class TestCreateBackend:
    def test_ephemeral_key(self):
        backend = create_backend(ProverSettings())

        assert isinstance(backend, LocalAttestationBackend)
        assert backend.extended is True

    def test_configured_key(self, tmp_path):
        signer = AttestationSigner.generate()
        key_file = tmp_path / "attest.pem"
        key_file.write_bytes(signer.export_private_pem())

        backend = create_backend(ProverSettings(signing_key_file=str(key_file), extended_outputs=False))

        assert backend.key_id == signer.key_id
        assert backend.extended is False
