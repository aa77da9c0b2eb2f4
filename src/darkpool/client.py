"""
HTTP client for the proof service.

- Sends JSON bodies built from ProgramInputs or raw dicts
- Returns decoded JSON responses
- Raises ProofGenerationError on transport or HTTP failures
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from darkpool.program.order_program import ProgramInputs
from darkpool.protocol.errors import ProofGenerationError
from darkpool.utils.json import json_dumps


class ProverHTTPClient:
    """
    Talks to a running proof service.

        client = ProverHTTPClient("http://localhost:3000")
        resp = client.generate_proof(request_body)
        check = client.verify_proof(resp["proof_data"])
    """

    def __init__(self, url: str, timeout: float = 300.0, session: Optional[requests.Session] = None):
        self._url = url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------
    def health(self) -> Dict[str, Any]:
        return self._get("/health")

    def stats(self) -> Dict[str, Any]:
        return self._get("/stats")

    def generate_proof(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/proof/generate", request)

    def generate_proof_for(self, inputs: ProgramInputs) -> Dict[str, Any]:
        """Build the service request body from program inputs."""
        data = inputs.to_dict()
        body = {
            "order": data["order"],
            "user_secret": data["secret"],
            "balance": data["balance"],
            "market_conditions": data["market_conditions"],
            "merkle_proof": data["merkle_proof"],
        }
        if data.get("balance_token"):
            body["balance_token"] = data["balance_token"]
        return self.generate_proof(body)

    def verify_proof(self, proof_data: str) -> Dict[str, Any]:
        return self._post("/proof/verify", {"proof_data": proof_data})

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------
    def _get(self, path: str) -> Dict[str, Any]:
        try:
            response = self._session.get(self._url + path, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ProofGenerationError(f"GET {path} failed: {e}") from e
        return response.json()

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._session.post(
                self._url + path,
                data=json_dumps(body),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ProofGenerationError(f"POST {path} failed: {e}") from e
        return response.json()
