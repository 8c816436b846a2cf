"""Tests for the relay HTTP client."""
import json

import httpx
import pytest

from conftest import APPLE_RESULT
from fruitguard.client import (
    GENERIC_FAILURE,
    RATE_LIMIT_NOTICE,
    UNAVAILABLE_NOTICE,
    RelayClient,
)


def _relay(handler):
    http = httpx.Client(base_url="http://relay.test", transport=httpx.MockTransport(handler))
    return RelayClient("http://relay.test", token="publishable-key", http_client=http)


def _respond(status_code, body):
    def handler(request):
        return httpx.Response(status_code, json=body)

    return handler


class TestRelayClient:
    """Test suite for the relay client."""

    def test_success_outcome(self):
        """Test a success response becomes a success outcome."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=APPLE_RESULT)

        outcome = _relay(handler).analyze("data:image/jpeg;base64,abc")

        assert outcome.status == "success"
        assert outcome.result == APPLE_RESULT
        assert outcome.notification.level == "success"
        assert outcome.notification.message == "Apple detected successfully!"
        assert outcome.stale is False

        request = seen[0]
        assert request.url.path == "/api/analyze-fruit"
        assert request.headers["authorization"] == "Bearer publishable-key"
        assert json.loads(request.content) == {"imageBase64": "data:image/jpeg;base64,abc"}

    @pytest.mark.parametrize(
        ("status_code", "notice"),
        [(429, RATE_LIMIT_NOTICE), (402, UNAVAILABLE_NOTICE)],
    )
    def test_advisories_hide_raw_error_text(self, status_code, notice):
        """Test 429 and 402 map to fixed advisory notices."""
        outcome = _relay(_respond(status_code, {"error": "raw upstream text"})).analyze("abc")

        assert outcome.status == "advisory"
        assert outcome.notification.message == notice
        assert outcome.result is None

    def test_other_failures_carry_relay_message(self):
        """Test other failures surface the relay error message."""
        outcome = _relay(_respond(500, {"error": "AI gateway error: 503"})).analyze("abc")

        assert outcome.status == "error"
        assert outcome.notification.message == "AI gateway error: 503"

    def test_failure_without_body_uses_generic_message(self):
        """Test a failure without a JSON body uses the generic message."""
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        outcome = _relay(handler).analyze("abc")

        assert outcome.notification.message == GENERIC_FAILURE

    def test_transport_error(self):
        """Test a transport error becomes an error outcome."""
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        outcome = _relay(handler).analyze("abc")

        assert outcome.status == "error"
        assert outcome.notification.message == GENERIC_FAILURE

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html><body>Proxy login</body></html>"),
            httpx.Response(200, json=["Apple"]),
            httpx.Response(200, json={}),
        ],
    )
    def test_success_status_without_object_body_is_an_error(self, response):
        """Test a 2xx without a JSON object body is an error outcome."""
        outcome = _relay(lambda request: response).analyze("abc")

        assert outcome.status == "error"
        assert outcome.notification.message == GENERIC_FAILURE
        assert outcome.result is None

    def test_not_identified_outcome(self):
        """Test an error variant with 200 becomes not_identified."""
        message = "Unable to identify fruit in the image. Please upload a clear image of a fruit."
        outcome = _relay(_respond(200, {"error": message})).analyze("abc")

        assert outcome.status == "not_identified"
        assert outcome.result == {"error": message}
        assert outcome.notification.level == "error"

    def test_outdated_response_is_marked_stale(self):
        """Test a response overtaken by a newer call is stale."""
        client = None

        def handler(request):
            if json.loads(request.content)["imageBase64"] == "first":
                # A second analysis starts while the first is still in flight.
                client.analyze("second")
            return httpx.Response(200, json=APPLE_RESULT)

        client = _relay(handler)
        first = client.analyze("first")

        assert first.token == 1
        assert client.latest_token == 2
        assert first.stale is True

    def test_tokens_increase(self):
        """Test request tokens increase monotonically."""
        client = _relay(_respond(200, APPLE_RESULT))

        tokens = [client.analyze("abc").token for _ in range(3)]

        assert tokens == [1, 2, 3]

    def test_analyze_sample_fetches_catalogue_image(self):
        """Test analyze_sample fetches the matching catalogue image."""
        def handler(request):
            if request.url.path == "/api/samples":
                return httpx.Response(
                    200,
                    json={"samples": [{"label": "Apple", "url": "http://images.test/apple.jpg", "emoji": ""}]},
                )
            if request.url.host == "images.test":
                return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})
            body = json.loads(request.content)
            assert body["imageBase64"].startswith("data:image/jpeg;base64,")
            return httpx.Response(200, json=APPLE_RESULT)

        outcome = _relay(handler).analyze_sample("apple")

        assert outcome.status == "success"

    def test_analyze_unknown_sample(self):
        """Test analyze_sample raises for an unknown label."""
        client = _relay(_respond(200, {"samples": []}))

        with pytest.raises(LookupError):
            client.analyze_sample("Durian")
