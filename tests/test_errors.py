from google.genai import errors as genai_errors

from imagestudio.api.errors import classify_error, upstream_status


class StatusCodeError(Exception):
    status_code = 401


def test_upstream_status_prefers_sdk_code():
    error = genai_errors.ClientError(
        429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
    )

    assert upstream_status(error) == 429


def test_upstream_status_reads_status_code_attribute():
    assert upstream_status(StatusCodeError()) == 401


def test_upstream_status_missing():
    assert upstream_status(ValueError("x")) is None


def test_rate_limit_body():
    error = genai_errors.ClientError(429, {"error": {"message": "quota"}})

    status, body = classify_error(error, "Failed to generate image")

    assert status == 429
    assert body["error"] == "API rate limit exceeded"
    assert body["suggestion"]


def test_bad_request_passes_sdk_message():
    error = genai_errors.ClientError(
        400, {"error": {"code": 400, "message": "Invalid argument", "status": "INVALID_ARGUMENT"}}
    )

    status, body = classify_error(error, "Failed to generate image")

    assert status == 400
    assert body == {"error": "Invalid request", "details": "Invalid argument"}


def test_invalid_key_body():
    status, body = classify_error(StatusCodeError("nope"), "Failed to generate image")

    assert status == 401
    assert body["error"] == "Invalid API key"


def test_other_failures_use_label():
    status, body = classify_error(RuntimeError("boom"), "Failed to manipulate image")

    assert status == 500
    assert body == {"error": "Failed to manipulate image", "details": "boom"}


def test_server_side_upstream_error_is_500():
    error = genai_errors.ServerError(503, {"error": {"message": "overloaded"}})

    status, body = classify_error(error, "Failed to generate image")

    assert status == 500
    assert body["details"] == "overloaded"
