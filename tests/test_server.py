"""
Tests for the FastAPI proof service.
"""

import base64
import time

import pytest
from fastapi.testclient import TestClient

from darkpool.core.settings import DarkPoolSettings, ServerSettings
from darkpool.protocol.errors import ProofGenerationError
from darkpool.prover.backend import LocalAttestationBackend
from darkpool.prover.signing import AttestationSigner
from darkpool.server.app import create_app
from darkpool.server.stats import ProofStats


def _request_body(inputs):
    data = inputs.to_dict()
    return {
        "order": data["order"],
        "user_secret": data["secret"],
        "balance": data["balance"],
        "market_conditions": data["market_conditions"],
        "merkle_proof": data["merkle_proof"],
    }


@pytest.fixture
def backend():
    return LocalAttestationBackend(AttestationSigner.generate())


@pytest.fixture
def client(backend):
    app = create_app(backend=backend, settings=DarkPoolSettings())
    return TestClient(app)


class TestHealthAndStats:
    def test_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert isinstance(body["timestamp"], int)
        assert body["version"]

    def test_stats_start_at_zero(self, client):
        body = client.get("/stats").json()

        assert body["total_proofs_generated"] == 0
        assert body["total_proofs_verified"] == 0
        assert body["average_generation_time_ms"] == 0.0


class TestGenerateProof:
    """Tests for POST /proof/generate."""

    def test_generate_valid_order(self, client, valid_inputs):
        resp = client.post("/proof/generate", json=_request_body(valid_inputs))

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["error"] is None
        assert body["proof_data"]
        assert body["public_values"]["is_valid"] is True
        assert body["cycles"] > 0
        assert client.get("/stats").json()["total_proofs_generated"] == 1

    def test_generate_invalid_order_commits_false(self, client, valid_inputs):
        """An unaffordable order is still a successful request with is_valid=False."""
        body = _request_body(valid_inputs)
        body["balance"] = 1

        resp = client.post("/proof/generate", json=body)

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.json()["public_values"]["is_valid"] is False

    def test_bad_hex_is_400(self, client, valid_inputs):
        body = _request_body(valid_inputs)
        body["order"]["wallet_address"] = "0x1234"

        resp = client.post("/proof/generate", json=body)

        assert resp.status_code == 400
        assert "wallet_address" in resp.json()["detail"]
        assert resp.json()["code"] == "validation_error"

    def test_bad_secret_is_400(self, client, valid_inputs):
        body = _request_body(valid_inputs)
        body["user_secret"] = "0x" + "zz" * 32

        resp = client.post("/proof/generate", json=body)

        assert resp.status_code == 400

    def test_missing_field_is_400(self, client, valid_inputs):
        body = _request_body(valid_inputs)
        del body["merkle_proof"]

        assert client.post("/proof/generate", json=body).status_code == 400

    def test_backend_failure(self, valid_inputs):
        class FailingBackend(LocalAttestationBackend):
            def prove(self, inputs):
                raise ProofGenerationError("prover offline")

        app = create_app(backend=FailingBackend(AttestationSigner.generate()), settings=DarkPoolSettings())
        resp = TestClient(app).post("/proof/generate", json=_request_body(valid_inputs))

        assert resp.status_code == 200
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "prover offline"
        assert resp.json()["error_code"] == "proof_generation_error"

    def test_matching_expected_hash(self, client, valid_inputs):
        body = _request_body(valid_inputs)
        body["expected_hash"] = "0x" + valid_inputs.public.expected_hash.hex()

        resp = client.post("/proof/generate", json=body)

        assert resp.json()["public_values"]["is_valid"] is True

    def test_mismatched_expected_hash_commits_false(self, client, valid_inputs):
        """A published hash for a different order fails inside the program."""
        body = _request_body(valid_inputs)
        body["expected_hash"] = "0x" + "00" * 32

        resp = client.post("/proof/generate", json=body)

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.json()["public_values"]["is_valid"] is False

    def test_malformed_expected_hash_is_400(self, client, valid_inputs):
        body = _request_body(valid_inputs)
        body["expected_hash"] = "0x1234"

        resp = client.post("/proof/generate", json=body)

        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_timeout_is_504(self, valid_inputs):
        class SlowBackend(LocalAttestationBackend):
            def prove(self, inputs):
                time.sleep(0.5)
                return super().prove(inputs)

        settings = DarkPoolSettings(server=ServerSettings(proof_timeout_seconds=0.05))
        app = create_app(backend=SlowBackend(AttestationSigner.generate()), settings=settings)
        resp = TestClient(app).post("/proof/generate", json=_request_body(valid_inputs))

        assert resp.status_code == 504


class TestVerifyProof:
    """Tests for POST /proof/verify."""

    def test_verify_generated_proof(self, client, valid_inputs):
        proof_data = client.post("/proof/generate", json=_request_body(valid_inputs)).json()["proof_data"]

        resp = client.post("/proof/verify", json={"proof_data": proof_data})

        assert resp.status_code == 200
        body = resp.json()
        assert body["valid"] is True
        assert body["public_values"]["is_valid"] is True
        assert client.get("/stats").json()["total_proofs_verified"] == 1

    def test_invalid_base64_is_400(self, client):
        resp = client.post("/proof/verify", json={"proof_data": "!!not base64!!"})

        assert resp.status_code == 400

    def test_missing_proof_data_is_400(self, client):
        assert client.post("/proof/verify", json={}).status_code == 400

    def test_garbage_artifact_is_invalid(self, client):
        proof_data = base64.b64encode(b"garbage").decode()

        resp = client.post("/proof/verify", json={"proof_data": proof_data})

        assert resp.status_code == 200
        assert resp.json()["valid"] is False
        assert resp.json()["error"]
        assert resp.json()["error_code"] == "proof_verification_error"


class TestProofStats:
    def test_average(self):
        stats = ProofStats()
        stats.record_generation(100)
        stats.record_generation(300)
        stats.record_verification()

        snapshot = stats.snapshot()

        assert snapshot.total_proofs_generated == 2
        assert snapshot.total_proofs_verified == 1
        assert snapshot.average_generation_time_ms == 200.0
