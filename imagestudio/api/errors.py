"""Upstream error classification for HTTP responses.

Mapping:
    - 429 -> rate limit body with retry-later hint.
    - 401 -> invalid key body.
    - 400 -> invalid request body with the upstream message passed through.
    - anything else -> 500 with the operation's generic failure label.

Status lookup order on the exception:
    `code` (`google.genai.errors.APIError`), `status_code`, then an integer
    `status`. The SDK's own `status` attribute is a string such as
    "RESOURCE_EXHAUSTED" and is ignored.

No errors are retried here.
"""

from typing import Any, Dict, Optional, Tuple

from google.genai import errors as genai_errors


RATE_LIMIT_BODY = {
    "error": "API rate limit exceeded",
    "details": "You have exceeded the API rate limit. Please wait a few minutes and try again.",
    "suggestion": "Consider upgrading your API plan for higher limits.",
}

INVALID_KEY_BODY = {
    "error": "Invalid API key",
    "details": "Please check your GEMINI_API_KEY in the environment variables.",
}


def upstream_status(exc: BaseException) -> Optional[int]:
    """Return the HTTP-like status reported by an upstream exception, if any."""
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _message(exc: BaseException) -> str:
    if isinstance(exc, genai_errors.APIError) and exc.message:
        return str(exc.message)
    return str(exc)


def classify_error(exc: BaseException, failure_label: str) -> Tuple[int, Dict[str, Any]]:
    """Map an exception to `(status_code, json_body)`.

    Args:
        exc: Exception raised while calling the model or normalizing its output.
        failure_label: Generic error text for the 500 case, for example
            "Failed to generate image".
    """
    status = upstream_status(exc)

    if status == 429:
        return 429, dict(RATE_LIMIT_BODY)
    if status == 401:
        return 401, dict(INVALID_KEY_BODY)
    if status == 400:
        return 400, {
            "error": "Invalid request",
            "details": _message(exc) or "The request was malformed or invalid.",
        }
    return 500, {"error": failure_label, "details": _message(exc)}
