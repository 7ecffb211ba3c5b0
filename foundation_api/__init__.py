"""Foundation API: OpenAI-compatible completions over a local text model."""

__version__ = "0.1.0"
