import json
from typing import Any, List

import pytest
import requests

from misskeyvt.client import Client, ClientError, Timeline


def response(status: int, body: Any = None, reason: str = "OK") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = b"" if body is None else (body if isinstance(body, bytes) else json.dumps(body).encode("utf-8"))
    return resp


class Recorder:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: List[Any] = []

    def __call__(self, url: str, **kwargs: Any) -> requests.Response:
        # Patched onto the class but not a function, so it never sees the session itself.
        self.calls.append((url, kwargs))
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def client() -> Client:
    return Client("https://example.test/", "token")


class TestClient:
    def test_server_normalization(self) -> None:
        client = Client("example.test", "token")
        assert client.server == "https://example.test"
        assert client.hostname == "example.test"

    def test_timeline(self, client: Client, monkeypatch) -> None:
        post = Recorder(response(200, [{"id": "n1"}]))
        monkeypatch.setattr(requests.Session, "post", post)

        assert client.fetchTimeline(Timeline.SOCIAL, until="n0") == [{"id": "n1"}]
        url, kwargs = post.calls[0]
        assert url == "https://example.test/api/notes/hybrid-timeline"
        assert kwargs["json"] == {"i": "token", "limit": 30, "untilId": "n0"}
        assert kwargs["timeout"] == 10.0

    def test_none_params_are_dropped(self, client: Client, monkeypatch) -> None:
        post = Recorder(response(200, []), response(204))
        monkeypatch.setattr(requests.Session, "post", post)

        client.fetchTimeline(Timeline.HOME)
        client.createNote("hello")
        assert post.calls[0][1]["json"] == {"i": "token", "limit": 30}
        assert post.calls[1][0] == "https://example.test/api/notes/create"
        assert post.calls[1][1]["json"] == {"i": "token", "text": "hello"}

    def test_renote(self, client: Client, monkeypatch) -> None:
        post = Recorder(response(200, {"createdNote": {}}))
        monkeypatch.setattr(requests.Session, "post", post)

        client.createRenote("n1")
        assert post.calls[0][0] == "https://example.test/api/notes/create"
        assert post.calls[0][1]["json"] == {"i": "token", "renoteId": "n1"}

    def test_http_error(self, client: Client, monkeypatch) -> None:
        monkeypatch.setattr(requests.Session, "post", Recorder(response(500, {}, "Internal Server Error")))

        with pytest.raises(ClientError, match="API request failed: 500 Internal Server Error"):
            client.createReaction("n1", "❤️")

    def test_transport_error(self, client: Client, monkeypatch) -> None:
        monkeypatch.setattr(requests.Session, "post", Recorder(requests.ConnectionError("refused")))

        with pytest.raises(ClientError, match="refused"):
            client.fetchNote("n1")

    def test_bad_json(self, client: Client, monkeypatch) -> None:
        monkeypatch.setattr(requests.Session, "post", Recorder(response(200, b"<html>")))

        with pytest.raises(ClientError):
            client.fetchChildren("n1")

    def test_meta(self, client: Client, monkeypatch) -> None:
        emojis = [{"name": "blob", "url": "https://cdn/blob.png"}]
        post = Recorder(response(200, {"name": "Example"}), response(200, {"emojis": emojis}))
        monkeypatch.setattr(requests.Session, "post", post)

        meta = client.fetchMeta()
        assert meta["emojis"] == emojis
        assert client.proxyUrl(meta) == "https://example.test/proxy"
        assert client.proxyUrl({"mediaProxy": "https://media.example.test/"}) == "https://media.example.test"

    def test_meta_falls_back_to_old_emoji_list(self, client: Client, monkeypatch) -> None:
        emojis = [{"name": "blob", "url": "https://cdn/blob.png"}]
        post = Recorder(response(200, {"emojis": emojis}), response(404, {}, "Not Found"))
        monkeypatch.setattr(requests.Session, "post", post)

        assert client.fetchMeta()["emojis"] == emojis

    def test_proxied_image(self, client: Client, monkeypatch) -> None:
        get = Recorder(response(200, b"GIF89a"), response(404, b"", "Not Found"))
        monkeypatch.setattr(requests.Session, "get", get)

        assert client.fetchProxiedImage("https://example.test/proxy", "https://cdn/blob.png") == b"GIF89a"
        url, kwargs = get.calls[0]
        assert url == "https://example.test/proxy/image.webp"
        assert kwargs["params"] == {"url": "https://cdn/blob.png", "type": "emoji"}

        with pytest.raises(ClientError):
            client.fetchProxiedImage("https://example.test/proxy", "https://cdn/gone.png")
