import base64
import hashlib
import json
from typing import Callable, Dict, Optional

import httpx
import pytest

from ideavote.catalog import load_catalog
from ideavote.store import GitHubVoteStore

REPO = "acme/idea-votes"
PATH = "votes.json"
API = "https://api.github.test"


class FakeGitHub:
    """
    Just enough of the GitHub contents API: GET and PUT on one path, with the
    sha checks GitHub applies (409 on mismatch, 422 when an existing file is
    updated without a sha).
    """

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.shas: Dict[str, str] = {}
        self.requests = []
        self.read_status: Optional[int] = None
        self.write_status: Optional[int] = None
        self.before_put: Optional[Callable[["FakeGitHub"], None]] = None

    def seed(self, records) -> str:
        return self.put_raw(json.dumps(records).encode())

    def put_raw(self, content: bytes) -> str:
        sha = hashlib.sha1(content).hexdigest()
        self.files[PATH] = content
        self.shas[PATH] = sha
        return sha

    def records(self):
        return json.loads(self.files[PATH])

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/contents/", 1)[1]

        if request.method == "GET":
            if self.read_status:
                return httpx.Response(self.read_status, json={"message": "Server Error"})
            if path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.encodebytes(self.files[path]).decode()
            return httpx.Response(200, json={"content": encoded, "encoding": "base64", "sha": self.shas[path]})

        if request.method == "PUT":
            if self.before_put:
                hook, self.before_put = self.before_put, None
                hook(self)
            if self.write_status:
                return httpx.Response(self.write_status, json={"message": "Server Error"})
            body = json.loads(request.content)
            if path in self.files:
                if "sha" not in body:
                    return httpx.Response(422, json={"message": "Invalid request.\n\n\"sha\" wasn't supplied."})
                if body["sha"] != self.shas[path]:
                    return httpx.Response(409, json={"message": f"{path} does not match {body['sha']}"})
            sha = self.put_raw(base64.b64decode(body["content"]))
            return httpx.Response(200, json={"content": {"path": path, "sha": sha}, "commit": {"message": body["message"]}})

        return httpx.Response(405)


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def store(github: FakeGitHub) -> GitHubVoteStore:
    return GitHubVoteStore(
        token="test-token",
        repo=REPO,
        path=PATH,
        api_url=API,
        transport=httpx.MockTransport(github.handler),
    )


@pytest.fixture
def catalog():
    return load_catalog()
