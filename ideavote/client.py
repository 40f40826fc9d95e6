"""
Client side of the vote API: submitting a finished ballot and building the
results view.

A failed submission is never retried. The payload is offered to the
clipboard instead, and when that fails too the user is told to save it by
hand.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from . import config
from .aggregation import aggregate_votes
from .errors import NetworkError, VoteStoreError, error_from_response
from .models import IdeaTally, SubmitAck, VoteRecord

logger = logging.getLogger(__name__)


class VoteApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = config.REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(details=str(e)) from e

        try:
            body = resp.json()
        except ValueError:
            body = None
        if not resp.is_success:
            raise error_from_response(resp.status_code, body)
        return body

    async def save_vote(self, record: VoteRecord) -> SubmitAck:
        body = await self._request("POST", "/api/save-vote", json=record.to_stored())
        try:
            return SubmitAck.model_validate(body)
        except PydanticValidationError as e:
            raise VoteStoreError("Unexpected response", details=str(e)) from e

    async def get_votes(self) -> List[Any]:
        return await self._request("GET", "/api/get-votes")


class SubmitOutcome(str, Enum):
    SAVED = "saved"
    COPIED = "copied"
    MANUAL = "manual"


@dataclass
class SubmitResult:
    outcome: SubmitOutcome
    payload: str
    error: Optional[VoteStoreError] = None


class Submitter:
    """
    Submits one ballot at a time. While a submission is pending `in_flight`
    is set and further submissions are refused, which is what disables the
    submit control in the UI.
    """

    def __init__(self, api: VoteApiClient, clipboard: Optional[Callable[[str], None]] = None):
        self.api = api
        self.clipboard = clipboard
        self.in_flight = False

    async def submit(self, record: VoteRecord) -> Optional[SubmitResult]:
        if self.in_flight:
            return None
        self.in_flight = True
        payload = json.dumps(record.to_stored(), indent=2, ensure_ascii=False)
        try:
            await self.api.save_vote(record)
            return SubmitResult(SubmitOutcome.SAVED, payload)
        except VoteStoreError as e:
            logger.error(f"Vote submission failed: {e.error}")
            return SubmitResult(self._fallback(payload), payload, e)
        finally:
            self.in_flight = False

    def _fallback(self, payload: str) -> SubmitOutcome:
        if self.clipboard is None:
            return SubmitOutcome.MANUAL
        try:
            self.clipboard(payload)
        except Exception as e:
            logger.error(f"Clipboard copy failed: {e}")
            return SubmitOutcome.MANUAL
        return SubmitOutcome.COPIED


async def fetch_results(api: VoteApiClient) -> List[IdeaTally]:
    """
    Ranking over every stored ballot. Read failures give an empty ranking.
    """
    try:
        records = await api.get_votes()
    except VoteStoreError as e:
        logger.error(f"Could not load votes: {e.error} {e.details or ''}".rstrip())
        return []
    if not isinstance(records, list):
        logger.error(f"Unexpected votes payload: {type(records).__name__}")
        return []
    return aggregate_votes(records)
