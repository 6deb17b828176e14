"""Gemini transport client for streamed image generation.

Architectural role:
    Wraps the `google-genai` SDK behind a minimal async interface so the image
    service and HTTP adapter never touch SDK objects directly.

Model invocation flow:
    `image.service` builds request parts -> `stream_content(parts)` ->
    `client.aio.models.generate_content_stream(...)` -> async chunk iterator
    consumed by `image.normalizer`.

Request parts:
    Parts are plain dicts so callers and tests can build them without the SDK:
    - `{"text": str}`
    - `{"inline_data": {"mime_type": str, "data": bytes}}`

Retry behavior:
    No retry loop is implemented. SDK exceptions (`google.genai.errors.APIError`)
    propagate to the caller for classification.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Protocol

from google import genai
from google.genai import types

from imagestudio.llm.provider_config import ProviderConfig


logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    """Minimal async interface required by the image service."""

    async def stream_content(self, parts: List[Dict[str, Any]]) -> AsyncIterator[Any]:
        """Send one user turn and return the streamed response chunks."""
        ...


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def inline_part(data: bytes, mime_type: str) -> Dict[str, Any]:
    return {"inline_data": {"mime_type": mime_type, "data": data}}


def _to_sdk_part(part: Dict[str, Any]) -> types.Part:
    if "inline_data" in part:
        inline = part["inline_data"]
        return types.Part.from_bytes(data=inline["data"], mime_type=inline["mime_type"])
    return types.Part.from_text(text=part["text"])


def build_contents(parts: List[Dict[str, Any]]) -> List[types.Content]:
    """Wrap request parts into a single user-role content entry."""
    return [types.Content(role="user", parts=[_to_sdk_part(p) for p in parts])]


class GeminiImageClient:
    """Streaming Gemini client bound to one `ProviderConfig`.

    Raises:
        RuntimeError: If the configuration carries no credential.
    """

    def __init__(self, config: ProviderConfig) -> None:
        if not config.has_credential:
            raise RuntimeError("GEMINI_API_KEY not configured")
        self.config = config
        self._client = genai.Client(api_key=config.credential)

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=list(self.config.response_modalities),
        )

    async def stream_content(self, parts: List[Dict[str, Any]]) -> AsyncIterator[Any]:
        """Start a streamed generation and return the SDK's async chunk iterator."""
        logger.info(
            "Streaming generation from %s (%d request parts)",
            self.config.model_id,
            len(parts),
        )
        return await self._client.aio.models.generate_content_stream(
            model=self.config.model_id,
            contents=build_contents(parts),
            config=self._generation_config(),
        )

    def check_connection(self, prompt: str = 'Hello, can you respond with just "API working"?') -> str:
        """Run one small non-streaming text generation against the probe model.

        Returns:
            The reply text, or `"No response"` when the reply carries no text.
        """
        response = self._client.models.generate_content(
            model=self.config.probe_model_id,
            contents=build_contents([text_part(prompt)]),
        )
        return response.text or "No response"
