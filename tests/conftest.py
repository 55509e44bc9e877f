"""
Shared fixtures: a Settings value pointing at temp files and a TestClient.
The explorer is never contacted; tests patch requests.request.
"""

import pytest
from requests.structures import CaseInsensitiveDict
from fastapi.testclient import TestClient

from dapp_portal.config.settings import Settings
from dapp_portal.main import create_app

INDEX_HTML = b"<!doctype html><html><body>portal</body></html>\n"
DAPPS_JSON = b'{"dapps": [{"name": "swap", "url": "https://swap.example"}]}\n'


@pytest.fixture
def settings(tmp_path):
    index_path = tmp_path / "index.html"
    dapps_path = tmp_path / "dapps.json"
    index_path.write_bytes(INDEX_HTML)
    dapps_path.write_bytes(DAPPS_JSON)
    return Settings(
        index_path=index_path,
        dapps_path=dapps_path,
        explorer_host="explorer.test",
    )


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


class FakeUpstreamResponse:
    def __init__(self, status_code=200, content=b"{}", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})


@pytest.fixture
def upstream(monkeypatch):
    """Record outbound calls and answer with a configurable response."""

    class Recorder:
        def __init__(self):
            self.response = FakeUpstreamResponse(headers={"Content-Type": "application/json"})
            self.error = None
            self.calls = []

    recorder = Recorder()

    def fake_request(method, url, headers=None, data=None, **kwargs):
        recorder.calls.append(
            {"method": method, "url": url, "headers": headers or {}, "data": data}
        )
        if recorder.error is not None:
            raise recorder.error
        return recorder.response

    monkeypatch.setattr("dapp_portal.proxy.requests.request", fake_request)
    return recorder
