from __future__ import annotations

import webbrowser

import pytest
import requests

from filamenthub.client.api_client import ApiClientError, ProfileApiClient, build_session
from filamenthub.client.download import DownloadFailedError, download_profile_file
from filamenthub.domain.profile import VoteDirection

WIRE_PROFILE = {
    "id": "p1",
    "name": "PLA Red",
    "producer": "Acme",
    "material": "PLA",
    "description": "",
    "printers": ["P1S"],
    "fileUrl": "http://files.test/p1.json",
    "fileName": "p1.json",
    "uploadedBy": "alice",
    "uploadedAt": "2025-01-01T12:00:00+00:00",
    "createdAt": None,
    "updatedAt": None,
    "downloadCount": 3,
    "upvotes": 2,
    "downvotes": 0,
    "votedUsers": {"bob": "up", "carol": "up"},
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", error=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.error = error

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.payload is None:
            raise ValueError("no json")
        return self.payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code}")

    def iter_content(self, chunk_size=1):
        # with an error set, the stream breaks after the first chunk
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]
            if self.error:
                raise self.error
        if self.error:
            raise self.error

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, responses=None, get_error=None):
        self.responses = list(responses or [])
        self.get_error = get_error
        self.headers = {}
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        if self.get_error:
            raise self.get_error
        return self.responses.pop(0)


def test_build_session_sets_bearer_header():
    session = build_session("tok")
    assert session.headers["Authorization"] == "Bearer tok"
    assert "Authorization" not in build_session().headers


def test_fetch_all_profiles_parses_wire_format():
    session = FakeSession([FakeResponse(payload={"data": [WIRE_PROFILE]})])
    client = ProfileApiClient("http://api.test/", session=session)
    [profile] = client.fetch_all_profiles()
    assert session.calls[0][:2] == ("GET", "http://api.test/api/profiles/")
    assert profile.file_url == "http://files.test/p1.json"
    assert profile.voted_users == {"bob": VoteDirection.UP, "carol": VoteDirection.UP}
    assert profile.net_score == 2


def test_persist_vote_sends_direction():
    session = FakeSession([FakeResponse(payload={"data": WIRE_PROFILE})])
    ProfileApiClient("http://api.test", token="tok", session=session).persist_vote("p1", VoteDirection.DOWN)
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "http://api.test/api/profiles/p1/vote")
    assert kwargs["json"] == {"direction": "down"}
    assert session.headers["Authorization"] == "Bearer tok"


def test_error_envelope_becomes_client_error():
    session = FakeSession([FakeResponse(409, payload={"error": "conflict", "message": "taken"})])
    client = ProfileApiClient("http://api.test", session=session)
    with pytest.raises(ApiClientError) as exc:
        client.update_profile("p1", name="Taken")
    assert exc.value.status_code == 409
    assert exc.value.error == "conflict"
    assert str(exc.value) == "taken"


class StubClient:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error

    def download_content(self, profile_id):
        if self.error:
            raise self.error
        return self.content


def test_direct_download_streams_to_disk(tmp_path):
    session = FakeSession([FakeResponse(content=b'{"a": 1}')])
    path = download_profile_file("http://files.test/p1.json", "p1.json", tmp_path, session=session)
    assert path == tmp_path / "p1.json"
    assert path.read_bytes() == b'{"a": 1}'


def test_falls_back_to_api_endpoint(tmp_path):
    session = FakeSession(get_error=requests.ConnectionError("blocked by CORS"))
    path = download_profile_file(
        "http://files.test/p1.json", "p1.json", tmp_path,
        profile_id="p1", client=StubClient(content=b"{}"), session=session,
    )
    assert path.read_bytes() == b"{}"


def test_falls_back_to_browser_tab(tmp_path):
    opened = []
    session = FakeSession([FakeResponse(status_code=403)])
    result = download_profile_file(
        "http://files.test/p1.json", "p1.json", tmp_path,
        profile_id="p1", client=StubClient(error=ApiClientError("down", 503)),
        session=session, opener=opened.append,
    )
    assert result is None
    assert opened == ["http://files.test/p1.json"]


def test_all_strategies_failing_raises(tmp_path):
    def no_browser(url):
        raise webbrowser.Error("no display")

    session = FakeSession([FakeResponse(content=b"partial", error=requests.ConnectionError("reset"))])
    with pytest.raises(DownloadFailedError) as exc:
        download_profile_file("http://files.test/p1.json", "p1.json", tmp_path, session=session, opener=no_browser)
    message = str(exc.value)
    assert "direct: reset" in message
    assert "browser: no display" in message
    assert "api:" not in message


def test_interrupted_stream_leaves_no_partial_file(tmp_path):
    opened = []
    cut = requests.exceptions.ChunkedEncodingError("cut")
    session = FakeSession([FakeResponse(content=b'{"nozzle_temperature": [220]}', error=cut)])

    result = download_profile_file(
        "http://files.test/p1.json", "p1.json", tmp_path, session=session, opener=opened.append,
    )
    assert result is None
    assert opened == ["http://files.test/p1.json"]
    assert list(tmp_path.iterdir()) == []


def test_attach_config_posts_form():
    session = FakeSession([FakeResponse(payload={"data": dict(
        WIRE_PROFILE, configFileName="x1c.json", configFileUrl="http://files.test/x1c.json",
        configPrinters=["X1 Carbon"], fileSize=120,
    )})])
    client = ProfileApiClient("http://api.test", session=session)
    profile = client.attach_config("p1", file_name="x1c.json", content=b"{}", printers=["X1 Carbon"])
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://api.test/api/profiles/p1/config")
    assert kwargs["data"] == {"printers": "X1 Carbon"}
    assert profile.config_printers == ["X1 Carbon"]
    assert profile.config_file_url == "http://files.test/x1c.json"
    assert profile.file_size == 120
