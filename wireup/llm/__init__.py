"""Model runtimes used for integration code generation."""

from .runner import LLMRunner, ModelError, ModelSettings

__all__ = ["LLMRunner", "ModelError", "ModelSettings"]
