import base64

import pytest
from fastapi.testclient import TestClient

from imagestudio.api.http_api import create_app
from imagestudio.llm.provider_config import ProviderConfig


PNG_BYTES = b"\x89PNG\r\n\x1a\nnot-really-a-png"


class FakeModelClient:
    """Stands in for `GeminiImageClient`; records every request."""

    def __init__(self, chunks=(), error=None, fail_after=None):
        self.chunks = list(chunks)
        self.error = error
        self.fail_after = fail_after
        self.calls = []

    async def stream_content(self, parts):
        self.calls.append(parts)
        if self.error is not None and self.fail_after is None:
            raise self.error
        return self._iterate()

    async def _iterate(self):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise self.error
            yield chunk


def make_image_chunk(data=PNG_BYTES, mime_type="image/png"):
    inline = {"data": base64.b64encode(data).decode("ascii")}
    if mime_type is not None:
        inline["mimeType"] = mime_type
    return {"candidates": [{"content": {"parts": [{"inlineData": inline}]}}]}


def make_text_chunk(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}], "text": text}


@pytest.fixture
def image_chunk():
    return make_image_chunk


@pytest.fixture
def text_chunk():
    return make_text_chunk


@pytest.fixture
def fake_client():
    return FakeModelClient


@pytest.fixture
def config():
    return ProviderConfig(credential="test-key")


@pytest.fixture
def make_test_client(config):
    def _make(client, app_config=None):
        return TestClient(create_app(app_config or config, client))
    return _make
