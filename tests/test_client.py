import asyncio
from types import SimpleNamespace

import pytest
from google.genai import types

from imagestudio.llm.client import GeminiImageClient, build_contents, inline_part, text_part
from imagestudio.llm.provider_config import ProviderConfig


def test_build_contents_wraps_parts_in_user_turn():
    contents = build_contents([text_part("edit this"), inline_part(b"img", "image/png")])

    assert len(contents) == 1
    assert contents[0].role == "user"
    assert contents[0].parts[0].text == "edit this"
    assert contents[0].parts[1].inline_data.data == b"img"
    assert contents[0].parts[1].inline_data.mime_type == "image/png"


def test_client_requires_credential():
    with pytest.raises(RuntimeError):
        GeminiImageClient(ProviderConfig(credential=""))


def test_stream_content_passes_model_and_modalities():
    captured = {}

    async def generate_content_stream(**kwargs):
        captured.update(kwargs)
        return "stream"

    config = ProviderConfig(credential="k", model_id="m-1", response_modalities=("IMAGE", "TEXT"))
    client = GeminiImageClient(config)
    client._client = SimpleNamespace(
        aio=SimpleNamespace(models=SimpleNamespace(generate_content_stream=generate_content_stream))
    )

    result = asyncio.run(client.stream_content([text_part("a red circle")]))

    assert result == "stream"
    assert captured["model"] == "m-1"
    assert isinstance(captured["config"], types.GenerateContentConfig)
    assert list(captured["config"].response_modalities) == ["IMAGE", "TEXT"]
    assert captured["contents"][0].parts[0].text == "a red circle"


def test_check_connection_uses_probe_model():
    captured = {}

    def generate_content(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(text="API working")

    client = GeminiImageClient(ProviderConfig(credential="k", probe_model_id="probe"))
    client._client = SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))

    assert client.check_connection() == "API working"
    assert captured["model"] == "probe"
