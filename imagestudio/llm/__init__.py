"""Model access package.

Architectural role:
    Provides provider configuration and the streaming transport used by the image
    service to invoke Gemini image models.

Module split:
    - `provider_config`: environment-driven `ProviderConfig`.
    - `client`: `google-genai` streaming client and request-part builders.
"""
