# -*- coding: utf-8 -*-
"""Fruit analysis and sample catalogue endpoints."""

from __future__ import annotations

import logging
import secrets
from typing import Optional

import yaml
from fastapi import APIRouter, Depends, Header
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from fruitguard.analyzers.fruit_analyzer import FruitAnalyzer
from fruitguard.config import Settings, get_settings
from fruitguard.errors import RelayError, Unauthorized
from fruitguard.models import AnalysisRequest
from fruitguard.samples import load_samples

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


def verify_bearer_token(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject requests whose bearer token does not match ``RELAY_AUTH_TOKEN``.

    Nothing is enforced while no token is configured.
    """
    expected = settings.relay_auth_token
    if not expected:
        return
    scheme, _, token = (authorization or "").partition(" ")
    # Header values arrive latin-1 decoded; compare_digest only accepts ASCII str.
    supplied = token.strip().encode("utf-8")
    if scheme.lower() != "bearer" or not secrets.compare_digest(supplied, expected.encode("utf-8")):
        logger.warning("Rejected relay request with missing or invalid bearer token")
        raise Unauthorized()


@router.post("/analyze-fruit", dependencies=[Depends(verify_bearer_token)])
async def analyze_fruit(payload: AnalysisRequest, settings: Settings = Depends(get_settings)):
    """Relay one image to the AI gateway and return the diagnosis."""
    analyzer = FruitAnalyzer(settings)
    relay_response = await run_in_threadpool(analyzer.handle, payload)
    return JSONResponse(status_code=relay_response.status_code, content=relay_response.body)


@router.get("/samples")
async def list_samples(settings: Settings = Depends(get_settings)):
    try:
        samples = load_samples(settings.samples_file)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.exception("Sample catalogue could not be loaded")
        raise RelayError("Sample catalogue is unavailable") from exc
    return {"samples": [sample.model_dump() for sample in samples]}
