"""
Tests for HttpSubmissionTransport against a mocked questionnaire API.
"""
import json

import httpx
import pytest

from questionnaire import HttpSubmissionTransport, TransportError, normalize_submission
from questionnaire.transport import SUBMIT_PATH

from conftest import FIXED_NOW, build_answers

BASE_URL = "http://questionnaire.test"


def make_transport(handler) -> HttpSubmissionTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSubmissionTransport(base_url=BASE_URL + "/", timeout=2.0, client=client)


@pytest.fixture
def record():
    return normalize_submission(build_answers(True), "user-1", now=FIXED_NOW)


class TestDeliverSuccess:

    @pytest.mark.asyncio
    async def test_posts_payload(self, record):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True, "id": 1})

        await make_transport(handler).deliver(record)

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == BASE_URL + SUBMIT_PATH
        assert json.loads(request.content) == record.to_payload()

    @pytest.mark.asyncio
    async def test_created_status_accepted(self, record):
        def handler(request):
            return httpx.Response(201, json={"success": True, "id": 7})

        await make_transport(handler).deliver(record)


class TestDeliverFailure:
    """Every failure surfaces as TransportError."""

    @pytest.mark.asyncio
    async def test_server_error_status(self, record):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        with pytest.raises(TransportError, match="status 503") as exc_info:
            await make_transport(handler).deliver(record)
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_error_message_from_body(self, record):
        def handler(request):
            return httpx.Response(400, json={"error": "crash duration required"})

        with pytest.raises(TransportError, match="crash duration required") as exc_info:
            await make_transport(handler).deliver(record)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_success_flag_missing(self, record):
        def handler(request):
            return httpx.Response(200, json={"id": 3})

        with pytest.raises(TransportError, match="did not confirm success"):
            await make_transport(handler).deliver(record)

    @pytest.mark.asyncio
    async def test_success_false(self, record):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": "disk full"})

        with pytest.raises(TransportError, match="disk full"):
            await make_transport(handler).deliver(record)

    @pytest.mark.asyncio
    async def test_connection_refused(self, record):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="not reachable") as exc_info:
            await make_transport(handler).deliver(record)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self, record):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(TransportError, match="timed out"):
            await make_transport(handler).deliver(record)


class TestTransportConfig:

    def test_trailing_slash_stripped(self):
        transport = HttpSubmissionTransport(base_url="http://example.org/")
        assert transport.base_url == "http://example.org"

    def test_defaults_from_environment(self):
        from questionnaire import transport as transport_module

        transport = HttpSubmissionTransport()
        assert transport.base_url == transport_module.QUESTIONNAIRE_API_URL.rstrip("/")
        assert transport.timeout == transport_module.QUESTIONNAIRE_API_TIMEOUT
