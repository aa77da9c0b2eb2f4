"""
Tests for the HTTP client, using a fake requests session.
"""

import json

import pytest
import requests

from darkpool.client import ProverHTTPClient
from darkpool.protocol.errors import ProofGenerationError


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse({})
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(("GET", url, None))
        if self.error:
            raise self.error
        return self.response

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append(("POST", url, json.loads(data)))
        if self.error:
            raise self.error
        return self.response


class TestProverHTTPClient:
    def test_health(self):
        session = FakeSession(FakeResponse({"status": "healthy"}))
        client = ProverHTTPClient("http://prover:3000/", session=session)

        assert client.health() == {"status": "healthy"}
        assert session.calls == [("GET", "http://prover:3000/health", None)]

    def test_generate_proof_for_inputs(self, valid_inputs):
        session = FakeSession(FakeResponse({"success": True}))
        client = ProverHTTPClient("http://prover:3000", session=session)

        client.generate_proof_for(valid_inputs)

        method, url, body = session.calls[0]
        assert method == "POST"
        assert url == "http://prover:3000/proof/generate"
        assert body["user_secret"] == "0x" + valid_inputs.private.secret.hex()
        assert body["merkle_proof"]["root"] == "0x" + valid_inputs.public.merkle_root.hex()
        assert "balance_token" not in body

    def test_verify_proof(self):
        session = FakeSession(FakeResponse({"valid": True}))
        client = ProverHTTPClient("http://prover:3000", session=session)

        assert client.verify_proof("abc=") == {"valid": True}
        assert session.calls[0][2] == {"proof_data": "abc="}

    def test_http_error(self):
        session = FakeSession(FakeResponse({"detail": "bad"}, status_code=400))
        client = ProverHTTPClient("http://prover:3000", session=session)

        with pytest.raises(ProofGenerationError):
            client.generate_proof({})

    def test_connection_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        client = ProverHTTPClient("http://prover:3000", session=session)

        with pytest.raises(ProofGenerationError):
            client.stats()
