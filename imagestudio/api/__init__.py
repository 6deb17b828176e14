"""imagestudio API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation, error classification, and response shaping.
- Delegates generation to `imagestudio.image.service`.
"""
