"""Image generation package.

Scope:
    Request flows for text-to-image and image manipulation, normalization of
    streamed model chunks into ordered results, and optional on-disk persistence
    of generated images.

Non-goals:
    - No retries or backoff.
    - No image post-processing.
"""
