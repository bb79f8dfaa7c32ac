"""
Delivery of submission records to the persistence API.

The session only depends on the SubmissionTransport protocol; the HTTP
implementation posts the canonical JSON payload with httpx and turns every
kind of failure into a TransportError.
"""

import os
import logging
from typing import Optional, Protocol

import httpx

from .errors import TransportError
from .normalizer import SubmissionRecord

logger = logging.getLogger(__name__)

# Persistence API location
QUESTIONNAIRE_API_URL = os.getenv("QUESTIONNAIRE_API_URL", "http://localhost:8083")
QUESTIONNAIRE_API_TIMEOUT = float(os.getenv("QUESTIONNAIRE_API_TIMEOUT", "10.0"))

SUBMIT_PATH = "/api/questionnaire-data"


class SubmissionTransport(Protocol):
    """Anything that can deliver a record to storage."""

    async def deliver(self, record: SubmissionRecord) -> None:
        ...


class HttpSubmissionTransport:
    """
    Posts submission records to the questionnaire API.

    A client can be injected (tests pass one backed by httpx.MockTransport or
    httpx.ASGITransport); otherwise a short-lived client is created per call.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or QUESTIONNAIRE_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else QUESTIONNAIRE_API_TIMEOUT
        self._client = client

    async def deliver(self, record: SubmissionRecord) -> None:
        """
        Send one record.

        Raises:
            TransportError: Network failure, non-2xx status, or a response
                body that does not report success
        """
        url = f"{self.base_url}{SUBMIT_PATH}"
        payload = record.to_payload()

        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload)
        except httpx.ConnectError as e:
            logger.warning(f"[TRANSPORT] Questionnaire API not reachable at {self.base_url}: {e}")
            raise TransportError(f"Questionnaire API not reachable: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning(f"[TRANSPORT] Request to {url} timed out after {self.timeout}s")
            raise TransportError("Questionnaire API request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"[TRANSPORT] HTTP error posting to {url}: {e}")
            raise TransportError(f"Failed to send questionnaire: {e}") from e

        body = _json_body(response)

        if not response.is_success:
            message = body.get("error") or f"status {response.status_code}"
            logger.warning(f"[TRANSPORT] Submission rejected ({response.status_code}): {message}")
            raise TransportError(
                f"Failed to save questionnaire: {message}", status_code=response.status_code
            )

        if body.get("success") is not True:
            message = body.get("error") or "response did not confirm success"
            logger.warning(f"[TRANSPORT] Unexpected response body: {body}")
            raise TransportError(
                f"Failed to save questionnaire: {message}", status_code=response.status_code
            )

        logger.info(f"[TRANSPORT] Questionnaire saved for {record.user_id}")


def _json_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
