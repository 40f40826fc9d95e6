# remote vote store: one JSON array in a file of a GitHub repository
import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import httpx

from .errors import (
    ConfigurationError,
    UpstreamReadError,
    UpstreamWriteError,
    WriteConflictError,
)

logger = logging.getLogger(__name__)

# 409: sha does not match; 422: sha missing for a file that now exists
CONFLICT_STATUSES = (409, 422)


@dataclass
class VoteStoreFile:
    """
    Full persisted state plus the sha it was read at.
    sha is None when the file does not exist yet.
    """
    records: List[Any] = field(default_factory=list)
    sha: Optional[str] = None


def _error_payload(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {"status": resp.status_code, "body": resp.text}


def encode_records(records: List[Any]) -> str:
    content = json.dumps(records, indent=2, ensure_ascii=False)
    return base64.b64encode(content.encode("utf-8")).decode("ascii")


def decode_records(encoded: str) -> List[Any]:
    # GitHub wraps base64 content at 60 columns; b64decode skips the newlines
    raw = base64.b64decode(encoded).decode("utf-8")
    records = json.loads(raw)
    if not isinstance(records, list):
        raise ValueError("stored votes are not a JSON array")
    return records


class GitHubVoteStore:
    """
    Read/write access to the votes file through the GitHub contents API.

    Every call opens its own client and re-reads from the remote; nothing is
    cached between calls.
    """

    def __init__(
        self,
        token: str,
        repo: str,
        path: str = "votes.json",
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.repo = repo
        self.path = path
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.api_url}/repos/{self.repo}/contents/{self.path}"

    def _headers(self) -> dict:
        if not self.token:
            raise ConfigurationError()
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def read(self) -> VoteStoreFile:
        headers = self._headers()
        try:
            async with self._client() as client:
                resp = await client.get(self.url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Reading {self.path} from {self.repo} failed: {e}")
            raise UpstreamReadError(details=str(e)) from e

        if resp.status_code == 404:
            logger.info(f"{self.path} not found in {self.repo}, treating as empty")
            return VoteStoreFile()
        if not resp.is_success:
            details = _error_payload(resp)
            logger.error(f"GitHub read error {resp.status_code}: {details}")
            raise UpstreamReadError(details=details)

        try:
            data = resp.json()
            records = decode_records(data["content"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamReadError("Stored votes are not valid JSON", str(e)) from e
        return VoteStoreFile(records=records, sha=data.get("sha"))

    async def write(self, records: List[Any], sha: Optional[str], message: str) -> Optional[str]:
        """
        Replace the file with `records`. `sha` must be the one returned by the
        read this write is based on (None when the file did not exist).
        Returns the new sha.
        """
        headers = self._headers()
        body = {"message": message, "content": encode_records(records)}
        if sha:
            body["sha"] = sha

        try:
            async with self._client() as client:
                resp = await client.put(self.url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Writing {self.path} to {self.repo} failed: {e}")
            raise UpstreamWriteError(details=str(e)) from e

        if not resp.is_success:
            details = _error_payload(resp)
            logger.error(f"GitHub API error {resp.status_code}: {details}")
            if resp.status_code in CONFLICT_STATUSES:
                raise WriteConflictError(details=details)
            raise UpstreamWriteError(details=details)

        content = resp.json().get("content") or {}
        return content.get("sha")
