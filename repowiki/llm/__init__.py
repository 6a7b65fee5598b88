"""Model endpoint client and structured-output schemas."""

from .runner import ImageInput, LLMError, LLMRequest, LLMRunner, StructuredResponseError

__all__ = ["ImageInput", "LLMError", "LLMRequest", "LLMRunner", "StructuredResponseError"]
