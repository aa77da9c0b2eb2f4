"""
Proof service (FastAPI).

Routes:
    GET  /health          liveness and version
    GET  /stats           proof counters
    POST /proof/generate  run the order program and return an artifact
    POST /proof/verify    check an artifact and return its public values

Diagnostics returned here describe transport and encoding problems only.
Whether an order was valid is visible solely through the committed
is_valid flag, never through an error message.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from darkpool import __version__
from darkpool.core.settings import DarkPoolSettings, get_settings
from darkpool.prover.backend import ExecutionBackend, create_backend
from darkpool.protocol.errors import (
    ProofGenerationError,
    ProofVerificationError,
    ValidationError,
)
from darkpool.utils.timestamps import monotonic_ms, unix_now

from .models import (
    ProofGenerationRequest,
    ProofResponse,
    ProofVerificationResponse,
)
from .stats import ProofStats

logger = logging.getLogger(__name__)


def create_app(
    backend: Optional[ExecutionBackend] = None,
    settings: Optional[DarkPoolSettings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    backend = backend or create_backend(settings.prover)
    stats = ProofStats()
    timeout = settings.server.proof_timeout_seconds

    app = FastAPI(title="Dark Pool Proof Service", version=__version__)
    app.state.backend = backend
    app.state.stats = stats

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "timestamp": unix_now(),
            "version": __version__,
        }

    @app.get("/stats")
    async def get_stats():
        return stats.snapshot().to_dict()

    @app.post("/proof/generate")
    async def generate_proof(body: dict):
        try:
            request = ProofGenerationRequest.from_dict(body)
            inputs = request.to_program_inputs()
        except ValidationError as ex:
            return JSONResponse(
                status_code=400,
                content={"detail": str(ex), "code": ex.code.value},
            )

        proof_id = str(uuid.uuid4())
        started = monotonic_ms()

        try:
            artifact, report = await asyncio.wait_for(
                asyncio.to_thread(_prove_and_report, backend, inputs),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Proof generation timed out: proof_id=%s", proof_id)
            raise HTTPException(status_code=504, detail="Proof generation timed out")
        except ProofGenerationError as e:
            elapsed = int(monotonic_ms() - started)
            logger.error(
                "Proof generation failed: proof_id=%s, error=%s, time=%dms",
                proof_id, e, elapsed,
            )
            return JSONResponse(
                content=ProofResponse(
                    proof_id=proof_id,
                    success=False,
                    generation_time_ms=elapsed,
                    error=str(e),
                    error_code=e.code.value,
                ).to_dict()
            )

        elapsed = int(monotonic_ms() - started)
        stats.record_generation(elapsed)
        logger.info(
            "Proof generated: proof_id=%s, time=%dms, cycles=%d",
            proof_id, elapsed, report.cycles,
        )

        return JSONResponse(
            content=ProofResponse(
                proof_id=proof_id,
                success=True,
                generation_time_ms=elapsed,
                proof_data=base64.b64encode(artifact.to_bytes()).decode("ascii"),
                public_values=report.outputs.to_dict(),
                cycles=report.cycles,
            ).to_dict()
        )

    @app.post("/proof/verify")
    async def verify_proof(body: dict):
        proof_data = body.get("proof_data")
        if not isinstance(proof_data, str):
            raise HTTPException(status_code=400, detail="proof_data must be a base64 string")
        try:
            artifact_bytes = base64.b64decode(proof_data, validate=True)
        except (binascii.Error, ValueError):
            raise HTTPException(status_code=400, detail="Invalid base64 encoding")

        try:
            outputs = backend.verify(artifact_bytes)
        except ProofVerificationError as e:
            logger.warning("Proof verification failed: %s", e)
            return JSONResponse(
                content=ProofVerificationResponse(
                    valid=False,
                    error=str(e),
                    error_code=e.code.value,
                ).to_dict()
            )

        stats.record_verification()
        return JSONResponse(
            content=ProofVerificationResponse(
                valid=True,
                public_values=outputs.to_dict(),
            ).to_dict()
        )

    return app


def _prove_and_report(backend: ExecutionBackend, inputs):
    report = backend.execute(inputs)
    artifact = backend.prove(inputs)
    return artifact, report


def run(settings: Optional[DarkPoolSettings] = None) -> None:
    import uvicorn

    settings = settings or get_settings()
    app = create_app(settings=settings)
    logger.info("Starting Dark Pool proof service on %s:%d", settings.server.host, settings.server.port)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level="info")
