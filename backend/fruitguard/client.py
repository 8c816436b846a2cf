"""HTTP client for the analysis relay."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Union

import httpx

from fruitguard.imaging import encode_image_file, fetch_image_as_data_url
from fruitguard.samples import SampleImage, find_sample

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze-fruit"
SAMPLES_PATH = "/api/samples"

RATE_LIMIT_NOTICE = "Rate limit exceeded. Please wait a moment and try again."
UNAVAILABLE_NOTICE = "Service temporarily unavailable. Please try again later."
GENERIC_FAILURE = "Failed to analyze image"


@dataclass
class Notification:
    level: str  # "success", "warning" or "error"
    message: str


@dataclass
class ClientOutcome:
    """What one ``analyze`` call produced.

    ``stale`` is set when a newer call was issued before this one finished;
    callers must not let a stale outcome replace fresher state.
    """

    token: int
    status: str  # "success", "not_identified", "advisory" or "error"
    notification: Notification
    result: Optional[Dict[str, Any]] = None
    http_status: Optional[int] = None
    stale: bool = False


class RelayClient:
    """Send images to the relay and translate its answers into outcomes."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 120.0,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._headers = headers
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._counter = itertools.count(1)
        self._latest_token = 0
        self._lock = Lock()

    def __enter__(self) -> "RelayClient":
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    @property
    def latest_token(self) -> int:
        with self._lock:
            return self._latest_token

    def _next_token(self) -> int:
        with self._lock:
            self._latest_token = next(self._counter)
            return self._latest_token

    def analyze(self, image: str) -> ClientOutcome:
        """Analyze a base64 image or data URL."""
        token = self._next_token()
        try:
            response = self._http.post(ANALYZE_PATH, json={"imageBase64": image}, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("Relay request failed: %s", exc)
            outcome = ClientOutcome(token=token, status="error", notification=Notification("error", GENERIC_FAILURE))
        else:
            outcome = self._interpret(token, response)

        outcome.stale = token != self.latest_token
        if outcome.stale:
            logger.debug("Discarding stale relay response (token=%s, latest=%s)", token, self.latest_token)
        return outcome

    def analyze_file(self, image_path: Union[str, Path]) -> ClientOutcome:
        return self.analyze(encode_image_file(image_path))

    def list_samples(self) -> List[Dict[str, Any]]:
        response = self._http.get(SAMPLES_PATH, headers=self._headers)
        response.raise_for_status()
        return list(response.json().get("samples", []))

    def analyze_sample(self, label: str) -> ClientOutcome:
        """Fetch a catalogue sample by label and analyze it."""
        catalogue = [SampleImage.model_validate(entry) for entry in self.list_samples()]
        sample = find_sample(label, catalogue)
        if sample is None:
            raise LookupError(f"Unknown sample image: {label}")
        return self.analyze(fetch_image_as_data_url(sample.url, client=self._http))

    @staticmethod
    def _interpret(token: int, response: httpx.Response) -> ClientOutcome:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        status = response.status_code
        if status == 429:
            return ClientOutcome(token, "advisory", Notification("warning", RATE_LIMIT_NOTICE), http_status=status)
        if status == 402:
            return ClientOutcome(token, "advisory", Notification("warning", UNAVAILABLE_NOTICE), http_status=status)
        if not response.is_success:
            message = str(body.get("error") or GENERIC_FAILURE)
            return ClientOutcome(token, "error", Notification("error", message), http_status=status)

        if not body:
            logger.error("Relay answered %s without a JSON object body", status)
            return ClientOutcome(token, "error", Notification("error", GENERIC_FAILURE), http_status=status)

        if body.get("error"):
            message = str(body["error"])
            return ClientOutcome(
                token,
                "not_identified",
                Notification("error", message),
                result={"error": message},
                http_status=status,
            )

        fruit_type = body.get("fruitType") or "Fruit"
        return ClientOutcome(
            token,
            "success",
            Notification("success", f"{fruit_type} detected successfully!"),
            result=body,
            http_status=status,
        )
