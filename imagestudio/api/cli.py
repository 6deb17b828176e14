"""
Command line interface for imagestudio.

Commands:
- `check`: send one short text prompt to the probe model and report whether
  the configured credential works.
- `generate PROMPT [--image PATH] [--out DIR]`: run a text-to-image (or, with
  `--image`, an image-manipulation) request and save image results to disk.

Error handling strategy:
- Missing credential, unreadable input images, and upstream failures are
  reported on stderr with a non-zero exit code.
- Upstream failures are classified with the same mapping as the HTTP API and
  printed with a short hint.
"""

import argparse
import asyncio
import mimetypes
import sys

from imagestudio.api.errors import upstream_status
from imagestudio.api.uploads import UploadRejected, validate_upload
from imagestudio.image.normalizer import ImageResult
from imagestudio.image.service import NoContentGenerated, generate_image, manipulate_image
from imagestudio.image.storage import make_persister
from imagestudio.llm.client import GeminiImageClient
from imagestudio.llm.provider_config import ProviderConfig


HINTS = {
    429: "Rate limit exceeded. Wait a few minutes and try again.",
    401: "Invalid API key. Please check your GEMINI_API_KEY.",
    400: "Bad request. The model or request format may be incorrect.",
}


def _report_failure(exc: Exception) -> None:
    print(f"Request failed: {exc}", file=sys.stderr)
    hint = HINTS.get(upstream_status(exc))
    if hint:
        print(hint, file=sys.stderr)


def _client(config: ProviderConfig):
    if not config.has_credential:
        print("GEMINI_API_KEY not found in environment variables", file=sys.stderr)
        return None
    return GeminiImageClient(config)


def run_check(config: ProviderConfig) -> int:
    client = _client(config)
    if client is None:
        return 1

    print(f"API key found. Testing {config.probe_model_id} with a simple text generation...")
    try:
        reply = client.check_connection()
    except Exception as exc:
        _report_failure(exc)
        return 1

    print(f"API response: {reply}")
    print("API is working. You can now try image generation.")
    return 0


def _read_image(path: str, config: ProviderConfig):
    with open(path, "rb") as f:
        data = f.read()
    guessed, _ = mimetypes.guess_type(path)
    return data, validate_upload(data, guessed, config.max_upload_bytes)


def run_generate(config: ProviderConfig, prompt: str, image_path=None, out_dir=None) -> int:
    client = _client(config)
    if client is None:
        return 1

    persist = make_persister(out_dir or config.output_dir)

    try:
        if image_path:
            data, mime_type = _read_image(image_path, config)
            coro = manipulate_image(prompt, data, mime_type, client, persist=persist)
        else:
            coro = generate_image(prompt, client, persist=persist)
        results = asyncio.run(coro)
    except (OSError, UploadRejected) as exc:
        print(f"Cannot use input image: {exc}", file=sys.stderr)
        return 1
    except NoContentGenerated as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except Exception as exc:
        _report_failure(exc)
        return 1

    for result in results:
        if isinstance(result, ImageResult):
            print(f"[image] {result.filename} ({result.mime_type}) -> {result.url}")
        else:
            print(result.content)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imagestudio", description="Gemini image generation tools")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Verify the configured API key with a small text request")

    gen = sub.add_parser("generate", help="Generate or edit an image from a prompt")
    gen.add_argument("prompt")
    gen.add_argument("--image", help="Image to edit instead of generating from scratch")
    gen.add_argument("--out", help="Directory for saved images (defaults to IMAGE_OUTPUT_DIR)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = ProviderConfig.from_env()

    if args.command == "check":
        return run_check(config)
    return run_generate(config, args.prompt, image_path=args.image, out_dir=args.out)


if __name__ == "__main__":
    sys.exit(main())
