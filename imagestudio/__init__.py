"""imagestudio: HTTP front end for Gemini image generation and editing."""
