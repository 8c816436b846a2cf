# -*- coding: utf-8 -*-
"""Relay between the web client and the hosted multimodal model."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from openai import APIConnectionError, APIError, APIStatusError, OpenAI
from pydantic import ValidationError

from fruitguard.config import Settings
from fruitguard.errors import (
    EmptyUpstreamResponse,
    InvalidInput,
    MalformedUpstreamPayload,
    Misconfigured,
    RateLimited,
    RelayError,
    UpstreamError,
    UpstreamUnavailable,
)
from fruitguard.models import AnalysisRequest, AnalysisResult, ErrorResult, RelayResponse
from fruitguard.prompts.fruit_prompt import FRUIT_SYSTEM_PROMPT, FRUIT_USER_INSTRUCTION

logger = logging.getLogger(__name__)

DATA_URI_PREFIX = "data:"
DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"

_BRACE_SPAN_PATTERN = re.compile(r"\{.*\}", flags=re.DOTALL)


def normalize_image_payload(image_base64: str) -> str:
    """Return ``image_base64`` as a data URI, wrapping raw payloads as JPEG."""
    if image_base64.startswith(DATA_URI_PREFIX):
        return image_base64
    return f"{DATA_URI_PREFIX}{DEFAULT_IMAGE_MEDIA_TYPE};base64,{image_base64}"


def extract_json_object(raw_text: str) -> Dict[str, Any]:
    """Parse the outermost ``{...}`` span of a model response.

    The span runs from the first opening brace to the last closing brace, so
    prose or code fences around the object are ignored.
    """
    match = _BRACE_SPAN_PATTERN.search(raw_text or "")
    if match is None:
        logger.error("No JSON object found in AI response: %s", raw_text)
        raise MalformedUpstreamPayload()

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse AI response (%s): %s", exc, raw_text)
        raise MalformedUpstreamPayload() from exc

    if not isinstance(payload, dict):
        logger.error("AI response JSON is not an object: %s", raw_text)
        raise MalformedUpstreamPayload()

    return payload


def _message_content(completion: Any) -> str:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if isinstance(content, list):
        # Some gateways split the message into typed parts.
        chunks = []
        for part in content:
            text = part.get("text") if isinstance(part, dict) else getattr(part, "text", None)
            if text:
                chunks.append(str(text))
        return "".join(chunks)
    return content or ""


def _upstream_body(exc: APIStatusError) -> str:
    try:
        return exc.response.text
    except Exception:  # pragma: no cover - body already consumed
        return str(exc.body)


class FruitAnalyzer:
    """Forward one fruit image to the AI gateway and reshape its answer.

    The analyzer keeps no state between invocations. ``handle`` never raises:
    every failure is reported as a ``RelayResponse`` with an ``error`` body.
    """

    def __init__(self, settings: Settings, client: Optional[Any] = None) -> None:
        self.settings = settings
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            logger.debug(
                "Creating AI gateway client (base_url=%s, model=%s)",
                self.settings.gateway_base_url,
                self.settings.gateway_model,
            )
            self._client = OpenAI(
                api_key=self.settings.gateway_api_key,
                base_url=self.settings.gateway_base_url,
                max_retries=0,
            )
        return self._client

    @staticmethod
    def build_messages(image_url: str) -> List[Dict[str, Any]]:
        """Return the chat messages sent to the model for one image."""
        return [
            {"role": "system", "content": FRUIT_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": FRUIT_USER_INSTRUCTION},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            },
        ]

    def handle(self, request: Union[AnalysisRequest, Mapping[str, Any]]) -> RelayResponse:
        """Run one relay invocation and return status code plus JSON body."""
        try:
            if not isinstance(request, AnalysisRequest):
                request = self._coerce_request(request)
            body = self.analyze(request.imageBase64)
        except RelayError as exc:
            logger.warning("Fruit analysis failed (kind=%s, status=%s): %s", exc.kind, exc.status_code, exc.message)
            return RelayResponse(status_code=exc.status_code, body=exc.to_body())
        except Exception:
            logger.exception("Error analyzing fruit")
            return RelayResponse(status_code=500, body=ErrorResult(error="Failed to analyze image").model_dump())

        return RelayResponse(status_code=200, body=body)

    @staticmethod
    def _coerce_request(request: Mapping[str, Any]) -> AnalysisRequest:
        try:
            return AnalysisRequest.model_validate(dict(request))
        except (TypeError, ValueError) as exc:
            raise InvalidInput("Invalid request body") from exc

    def analyze(self, image_base64: Optional[str]) -> Dict[str, Any]:
        """Return the parsed model output or raise a ``RelayError``."""
        if not image_base64:
            raise InvalidInput()

        if not self.settings.gateway_api_key:
            logger.error("AI_GATEWAY_API_KEY is not configured, skipping upstream call")
            raise Misconfigured()

        image_url = normalize_image_payload(image_base64)
        logger.info("Fruit analysis requested (image_chars=%s)", len(image_url))

        raw_text = self._call_gateway(self.build_messages(image_url))

        payload = extract_json_object(raw_text)

        if "error" in payload:
            logger.info("Model could not identify a fruit: %s", payload.get("error"))
            return payload

        self._check_schema(payload)
        logger.info("Fruit analysis completed (fruit=%s)", payload.get("fruitType"))
        return payload

    def _call_gateway(self, messages: List[Dict[str, Any]]) -> str:
        client = self._get_client()
        try:
            completion = client.chat.completions.create(
                model=self.settings.gateway_model,
                messages=messages,
            )
        except APIStatusError as exc:
            if exc.status_code == 429:
                raise RateLimited() from exc
            if exc.status_code == 402:
                raise UpstreamUnavailable() from exc
            logger.error("AI gateway error: %s %s", exc.status_code, _upstream_body(exc))
            raise UpstreamError(exc.status_code) from exc
        except APIConnectionError as exc:
            logger.exception("AI gateway request failed")
            raise UpstreamError(message="AI gateway error: connection failed") from exc
        except APIError as exc:
            logger.exception("AI gateway response could not be read")
            raise UpstreamError(message="AI gateway error: invalid response") from exc

        raw_text = _message_content(completion)
        if not raw_text:
            raise EmptyUpstreamResponse()

        logger.debug("AI gateway response received (length=%s chars)", len(raw_text))
        return raw_text

    def _check_schema(self, payload: Dict[str, Any]) -> None:
        try:
            AnalysisResult.model_validate(payload)
        except ValidationError as exc:
            if self.settings.strict_result_validation:
                logger.error("AI response does not match the result schema: %s", exc)
                raise MalformedUpstreamPayload() from exc
            logger.warning("AI response does not match the result schema, passing through: %s", exc)
