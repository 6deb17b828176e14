"""Image generation flows used by the HTTP adapter and the CLI.

Role in pipeline:
    - Builds the request parts for text-to-image and image-manipulation calls.
    - Invokes the model client in streaming mode.
    - Hands the chunk stream to `image.normalizer` and returns ordered results.

Error handling strategy:
    - Model client exceptions are propagated unchanged for classification by
      `imagestudio.api.errors`.
    - An empty normalized result list raises `NoContentGenerated`.
"""

import logging
from typing import List, Optional

from imagestudio.image.normalizer import Persist, Result, anormalize
from imagestudio.llm.client import ModelClient, inline_part, text_part


logger = logging.getLogger(__name__)

TEXT_TO_IMAGE = "text_to_image"
IMAGE_MANIPULATION = "image_manipulation"
MANIPULATION_PROMPT_TEMPLATE = "Based on the uploaded image, {prompt}"


class NoContentGenerated(RuntimeError):
    """The model stream finished without any usable image or text chunk."""

    def __init__(self, message: str = "No content generated") -> None:
        super().__init__(message)


async def _run(client: ModelClient, parts, base_name: str, persist: Optional[Persist]) -> List[Result]:
    stream = await client.stream_content(parts)
    results = await anormalize(stream, base_name, persist=persist)
    if not results:
        raise NoContentGenerated()
    logger.info("%s produced %d results", base_name, len(results))
    return results


async def generate_image(
    prompt: str,
    client: ModelClient,
    persist: Optional[Persist] = None,
) -> List[Result]:
    """Generate images (and commentary text) from a text prompt.

    Args:
        prompt: User prompt forwarded verbatim.
        client: Streaming model client.
        persist: Optional disk-delivery hook; see `image.storage.make_persister`.

    Raises:
        NoContentGenerated: The stream yielded no results.
    """
    logger.info("Generating image for prompt: %s", prompt)
    return await _run(client, [text_part(prompt)], TEXT_TO_IMAGE, persist)


async def manipulate_image(
    prompt: str,
    image_bytes: bytes,
    mime_type: str,
    client: ModelClient,
    persist: Optional[Persist] = None,
) -> List[Result]:
    """Edit an uploaded image according to `prompt`.

    The prompt is wrapped as "Based on the uploaded image, ..." and sent ahead of
    the image as an inline-data part.
    """
    logger.info("Manipulating image with prompt: %s", prompt)
    parts = [
        text_part(MANIPULATION_PROMPT_TEMPLATE.format(prompt=prompt)),
        inline_part(image_bytes, mime_type),
    ]
    return await _run(client, parts, IMAGE_MANIPULATION, persist)
