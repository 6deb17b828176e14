"""Normalization of streamed model responses into ordered, typed results.

Processing flow:
    1. Each streamed chunk is ingested once by `parse_chunk`, which returns a
       `ChunkPart` for a well-formed chunk or `None` for a malformed one.
    2. `ResponseNormalizer.feed` turns a `ChunkPart` into an `ImageResult` or a
       `TextResult` and appends it to the running list.
    3. `normalize` / `anormalize` drive the accumulator over a sync or async
       chunk sequence until it is exhausted.

Chunk shapes:
    - SDK response objects (`chunk.candidates[0].content.parts[0].inline_data`),
      where inline data is already raw bytes.
    - Plain mappings decoded from JSON (`inlineData` / `inline_data`,
      `mimeType` / `mime_type`), where inline data is a base64 string.

Ordering:
    Result order equals chunk arrival order. Adjacent text fragments are not
    merged and nothing is deduplicated.

Side effects:
    None, unless a `persist` callable is supplied (disk delivery), in which case
    image bytes are handed to it and the result carries the returned URL.
"""

import base64
import binascii
import logging
import mimetypes
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, AsyncIterable, Callable, Iterable, List, Optional, Union


logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"
DEFAULT_EXTENSION = "png"

Persist = Callable[[str, bytes], str]


@dataclass(frozen=True)
class ChunkPart:
    """First content part of a well-formed chunk."""

    data: Optional[bytes] = None
    mime_type: Optional[str] = None
    text: Optional[str] = None
    has_inline_data: bool = False


@dataclass
class ImageResult:
    data: Optional[bytes]
    mime_type: str
    filename: str
    url: Optional[str] = None

    def to_dict(self) -> dict:
        payload = {"type": "image"}
        if self.url is not None:
            payload["url"] = self.url
        else:
            payload["data"] = base64.b64encode(self.data or b"").decode("ascii")
        payload["mimeType"] = self.mime_type
        payload["filename"] = self.filename
        return payload


@dataclass
class TextResult:
    content: str

    def to_dict(self) -> dict:
        return {"type": "text", "content": self.content}


Result = Union[ImageResult, TextResult]


def _field(obj: Any, *names: str) -> Any:
    """Return the first non-None attribute or mapping entry among `names`."""
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _decode_payload(data: Any) -> bytes:
    if data is None:
        return b""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return base64.b64decode(data, validate=True)


def parse_chunk(chunk: Any) -> Optional[ChunkPart]:
    """Ingest one streamed chunk.

    Returns:
        `ChunkPart` for the first part of the first candidate, or `None` when the
        candidates/content/parts path is missing or the inline payload cannot be
        decoded.
    """
    try:
        candidates = _field(chunk, "candidates")
        if not candidates:
            return None
        content = _field(candidates[0], "content")
        if content is None:
            return None
        parts = _field(content, "parts")
        if not parts:
            return None
        part = parts[0]
    except (TypeError, KeyError, IndexError):
        return None

    inline = _field(part, "inline_data", "inlineData")
    if inline is not None:
        try:
            data = _decode_payload(_field(inline, "data"))
        except (binascii.Error, ValueError, TypeError):
            return None
        return ChunkPart(
            data=data,
            mime_type=_field(inline, "mime_type", "mimeType"),
            has_inline_data=True,
        )

    text = _field(chunk, "text")
    if not isinstance(text, str):
        text = _field(part, "text")
    return ChunkPart(text=text if isinstance(text, str) else None)


def extension_for(mime_type: Optional[str]) -> str:
    """File extension (without dot) for a media type; `png` when unknown."""
    if not mime_type:
        return DEFAULT_EXTENSION
    extension = mimetypes.guess_extension(mime_type)
    if not extension:
        return DEFAULT_EXTENSION
    return extension.lstrip(".")


def make_filename(base_name: str, timestamp_ms: int, index: int, mime_type: Optional[str]) -> str:
    return f"{base_name}_{timestamp_ms}_{index}.{extension_for(mime_type)}"


class ResponseNormalizer:
    """Accumulates results for one response.

    State is limited to the running image index and the result list, so one
    instance must not be shared between requests.
    """

    def __init__(
        self,
        base_name: str,
        persist: Optional[Persist] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_name = base_name
        self.persist = persist
        self.clock = clock
        self.index = 0
        self.results: List[Result] = []

    def feed(self, chunk: Any) -> Optional[Result]:
        part = parse_chunk(chunk)
        if part is None:
            logger.debug("Skipping malformed chunk for %s", self.base_name)
            return None

        if part.has_inline_data:
            result = self._image_result(part)
        elif part.text:
            result = TextResult(content=part.text)
        else:
            return None

        self.results.append(result)
        return result

    def _image_result(self, part: ChunkPart) -> ImageResult:
        filename = make_filename(
            self.base_name,
            int(self.clock() * 1000),
            self.index,
            part.mime_type,
        )
        self.index += 1
        mime_type = part.mime_type or DEFAULT_MIME_TYPE

        if self.persist is not None:
            # Write errors propagate and fail the whole request.
            url = self.persist(filename, part.data or b"")
            return ImageResult(data=None, mime_type=mime_type, filename=filename, url=url)

        return ImageResult(data=part.data, mime_type=mime_type, filename=filename)


def normalize(
    chunks: Iterable[Any],
    base_name: str,
    persist: Optional[Persist] = None,
    clock: Callable[[], float] = time.time,
) -> List[Result]:
    """Normalize a synchronous chunk sequence, consuming it to exhaustion."""
    normalizer = ResponseNormalizer(base_name, persist=persist, clock=clock)
    for chunk in chunks:
        normalizer.feed(chunk)
    return normalizer.results


async def anormalize(
    chunks: AsyncIterable[Any],
    base_name: str,
    persist: Optional[Persist] = None,
    clock: Callable[[], float] = time.time,
) -> List[Result]:
    """Normalize an async chunk stream, suspending at each chunk boundary."""
    normalizer = ResponseNormalizer(base_name, persist=persist, clock=clock)
    async for chunk in chunks:
        normalizer.feed(chunk)
    return normalizer.results
