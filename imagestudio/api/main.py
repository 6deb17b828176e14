"""
Server entrypoint for the imagestudio HTTP API.

Runs `imagestudio.api.http_api:app` under uvicorn.

Environment:
- `HOST` / `PORT`: bind address (defaults `127.0.0.1:3000`).
- `DEBUG == "true"`: enables debug-level logging, including skipped-chunk
  diagnostics from the normalizer.
"""

import logging
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

DEBUG = os.getenv("DEBUG") == "true"


def main():
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "3000"))

    logging.getLogger(__name__).info(
        "Image generation server running on http://%s:%d (health: /api/health)",
        host,
        port,
    )
    uvicorn.run("imagestudio.api.http_api:app", host=host, port=port)


if __name__ == "__main__":
    main()
