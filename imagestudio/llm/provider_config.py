"""Provider/runtime configuration for the Gemini image layer.

Architectural role:
    Centralizes model selection, credential lookup, and result-delivery settings
    consumed by `imagestudio.llm.client`, `imagestudio.image.service`, and the
    HTTP adapter.

Configuration flow:
    - `.env` values are loaded once at import time via `load_dotenv()`.
    - `ProviderConfig.from_env()` snapshots the environment into an immutable
      object that callers pass around explicitly.

Determinism:
    Deterministic for a fixed process environment and key files.

Failure behavior:
    A missing credential is represented as an empty string. The HTTP adapter
    turns it into a 500 response; the CLI reports it and exits non-zero.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


DEFAULT_MODEL_ID = "gemini-2.5-flash-image-preview"
DEFAULT_PROBE_MODEL_ID = "gemini-1.5-flash"
DEFAULT_RESPONSE_MODALITIES = ("IMAGE", "TEXT")
DEFAULT_KEY_FILE = "config/gemini.key"

OUTPUT_MODE_INLINE = "inline"
OUTPUT_MODE_DISK = "disk"
OUTPUT_MODES = (OUTPUT_MODE_INLINE, OUTPUT_MODE_DISK)

MAX_UPLOAD_SIZE_MB = 10
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024

# Relative to the working directory the server is started from.
DEFAULT_OUTPUT_DIR = os.path.join("public", "generated")


def load_key(path):
    """Load the Gemini API key from environment override or key file.

    Resolution order:
        1. `GEMINI_API_KEY` environment variable.
        2. Raw file contents at `path`.

    Edge cases:
        - `None` path with no environment value returns `None`.
        - Missing file returns `None`.
    """
    env_value = os.getenv("GEMINI_API_KEY")
    if env_value:
        return env_value.strip()
    if not path or not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def parse_modalities(raw: Optional[str]) -> Tuple[str, ...]:
    """Parse a comma separated modality list (`"IMAGE,TEXT"`)."""
    if not raw:
        return DEFAULT_RESPONSE_MODALITIES
    values = tuple(item.strip().upper() for item in raw.split(",") if item.strip())
    return values or DEFAULT_RESPONSE_MODALITIES


@dataclass(frozen=True)
class ProviderConfig:
    """Runtime configuration for the image generation front end.

    Attributes:
        credential: Gemini API key. Empty string when not configured.
        model_id: Image-capable model used for generation and manipulation.
        response_modalities: Modalities requested from the model.
        output_mode: `inline` returns base64 image data in the response body;
            `disk` writes files under `output_dir` and returns URLs.
        output_dir: Destination directory for disk delivery.
        max_upload_bytes: Upload size ceiling for manipulation requests.
        probe_model_id: Text model used by the CLI connectivity check.
    """

    credential: str = ""
    model_id: str = DEFAULT_MODEL_ID
    response_modalities: Tuple[str, ...] = DEFAULT_RESPONSE_MODALITIES
    output_mode: str = OUTPUT_MODE_INLINE
    output_dir: str = DEFAULT_OUTPUT_DIR
    max_upload_bytes: int = MAX_UPLOAD_SIZE_BYTES
    probe_model_id: str = DEFAULT_PROBE_MODEL_ID

    def __post_init__(self):
        if self.output_mode not in OUTPUT_MODES:
            raise ValueError(
                f"Unknown output mode {self.output_mode!r}; expected one of {OUTPUT_MODES}"
            )

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)

    @property
    def writes_to_disk(self) -> bool:
        return self.output_mode == OUTPUT_MODE_DISK

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Build a configuration snapshot from the current environment.

        Relevant environment variables:
            - `GEMINI_API_KEY` (or the `config/gemini.key` file)
            - `GEMINI_IMAGE_MODEL`
            - `GEMINI_RESPONSE_MODALITIES`
            - `GEMINI_PROBE_MODEL`
            - `IMAGE_OUTPUT_MODE`
            - `IMAGE_OUTPUT_DIR`
        """
        return cls(
            credential=load_key(DEFAULT_KEY_FILE) or "",
            model_id=os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_MODEL_ID).strip(),
            response_modalities=parse_modalities(os.getenv("GEMINI_RESPONSE_MODALITIES")),
            output_mode=os.getenv("IMAGE_OUTPUT_MODE", OUTPUT_MODE_INLINE).strip().lower(),
            output_dir=os.getenv("IMAGE_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
            probe_model_id=os.getenv("GEMINI_PROBE_MODEL", DEFAULT_PROBE_MODEL_ID).strip(),
        )
