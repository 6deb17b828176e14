"""Disk persistence for generated images (long-running server deployment).

Side effects:
    - Creates the output directory on demand (idempotent).
    - Writes one file per image result; filenames embed a millisecond timestamp
      and per-response index, so concurrent requests write distinct paths.

Error handling strategy:
    Write failures are logged and re-raised. The calling request fails as a
    whole; no partial results are returned.
"""

import logging
import os
from functools import partial

from imagestudio.image.normalizer import Persist


logger = logging.getLogger(__name__)

PUBLIC_URL_PREFIX = "/generated"


def save_binary_file(output_dir: str, filename: str, data: bytes) -> str:
    """Write `data` to `output_dir/filename` and return its public URL path."""
    file_path = os.path.join(output_dir, os.path.basename(filename))
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(data)
    except OSError:
        logger.exception("Error writing file %s", filename)
        raise

    logger.info("File %s saved to %s", filename, file_path)
    return f"{PUBLIC_URL_PREFIX}/{os.path.basename(filename)}"


def make_persister(output_dir: str) -> Persist:
    """Bind `output_dir` so the result can serve as a normalizer `persist` hook."""
    return partial(save_binary_file, output_dir)
