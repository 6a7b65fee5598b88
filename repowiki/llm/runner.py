"""Client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import base64
import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx

from ..config import LLMConfig
from ..logging import get_logger

_AUTO_API_KEY = object()

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n(.*)\n```\s*$", re.DOTALL)

logger = get_logger("llm")


class LLMError(RuntimeError):
    """Raised when the model endpoint fails or returns nothing usable."""


class StructuredResponseError(LLMError):
    """Raised when a structured response cannot be parsed as JSON."""


@dataclass(frozen=True)
class ImageInput:
    """Inline image attached to a prompt."""

    data: bytes
    mime_type: str = "image/jpeg"

    def as_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass
class LLMRequest:
    """A single generation request as handed to the transport."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]
    response_schema: Optional[Dict[str, Any]] = None
    schema_name: Optional[str] = None
    images: Sequence[ImageInput] = field(default_factory=tuple)


Transport = Callable[[LLMRequest], Awaitable[str]]


class LLMRunner:
    """Sends prompts to the configured model and returns text or parsed JSON."""

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_MODEL_KEYS = ("REPOWIKI_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("REPOWIKI_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("REPOWIKI_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None | object = _AUTO_API_KEY,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 120.0,
        runner: Transport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = (
            base_url or self._first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        ).rstrip("/")
        if api_key is _AUTO_API_KEY:
            self.api_key = self._first_env_value(self.ENV_API_KEY_KEYS)
        else:
            self.api_key = api_key  # type: ignore[assignment]
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._client = client
        self._owns_client = client is None
        self._runner: Transport = runner or self._http_runner

    @classmethod
    def from_config(cls, config: LLMConfig, **kwargs: Any) -> "LLMRunner":
        options: Dict[str, Any] = {
            "model": config.model,
            "base_url": config.base_url,
        }
        if config.api_key:
            options["api_key"] = config.api_key
        if config.temperature is not None:
            options["temperature"] = config.temperature
        if config.max_tokens is not None:
            options["max_tokens"] = config.max_tokens
        if config.request_timeout is not None:
            options["request_timeout"] = config.request_timeout
        options.update(kwargs)
        return cls(**options)

    async def generate_text(
        self,
        prompt: str,
        *,
        system: str | None = None,
        images: Sequence[ImageInput] = (),
    ) -> str:
        """Return free-form text for the prompt."""
        text = await self._runner(self._build_request(prompt, system=system, images=images))
        if not text or not text.strip():
            raise LLMError("Model returned an empty response")
        return text.strip()

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: Dict[str, Any],
        name: str,
        system: str | None = None,
        images: Sequence[ImageInput] = (),
    ) -> Any:
        """Return the parsed JSON value of a schema-constrained generation."""
        request = self._build_request(
            prompt, system=system, images=images, schema=schema, schema_name=name
        )
        text = await self._runner(request)
        if not text or not text.strip():
            raise StructuredResponseError(f"Model returned no content for '{name}'")
        return parse_json_text(text)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_request(
        self,
        prompt: str,
        *,
        system: str | None,
        images: Sequence[ImageInput],
        schema: Dict[str, Any] | None = None,
        schema_name: str | None = None,
    ) -> LLMRequest:
        return LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
            response_schema=schema,
            schema_name=schema_name,
            images=tuple(images),
        )

    async def _http_runner(self, request: LLMRequest) -> str:
        endpoint = f"{request.base_url}/chat/completions"
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=request.request_timeout or 120.0)

        logger.debug("POST %s model=%s schema=%s", endpoint, request.model, request.schema_name)
        try:
            response = await self._client.post(
                endpoint, headers=headers, json=build_payload(request)
            )
        except httpx.HTTPError as exc:
            raise LLMError(f"LLM request failed: {exc}") from exc

        if response.status_code >= 400:
            detail = response.text.strip() or response.reason_phrase
            raise LLMError(f"LLM request failed with status {response.status_code}: {detail}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise LLMError("LLM endpoint returned invalid JSON") from exc
        return extract_content(payload)

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


def build_payload(request: LLMRequest) -> Dict[str, Any]:
    """Translate a request into the chat-completions JSON body."""
    messages: List[Dict[str, Any]] = []
    if request.system:
        messages.append({"role": "system", "content": request.system})
    if request.images:
        parts: List[Dict[str, Any]] = [
            {"type": "image_url", "image_url": {"url": image.as_data_url()}}
            for image in request.images
        ]
        parts.append({"type": "text", "text": request.prompt})
        messages.append({"role": "user", "content": parts})
    else:
        messages.append({"role": "user", "content": request.prompt})

    payload: Dict[str, Any] = {"model": request.model, "messages": messages}
    if request.temperature is not None:
        payload["temperature"] = request.temperature
    if request.max_tokens is not None:
        payload["max_tokens"] = request.max_tokens
    if request.response_schema is not None:
        payload["response_format"] = {
            "type": "json_schema",
            "json_schema": {
                "name": request.schema_name or "response",
                "schema": request.response_schema,
                "strict": False,
            },
        }
    return payload


def extract_content(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content
    text = first.get("text")
    if isinstance(text, str):
        return text
    return ""


def parse_json_text(text: str) -> Any:
    """Parse model output as JSON, unwrapping a Markdown code fence if present."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        stripped = match.group(1).strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as exc:
        raise StructuredResponseError(f"Model returned unparsable JSON: {exc.msg}") from exc


__all__ = [
    "ImageInput",
    "LLMError",
    "LLMRequest",
    "LLMRunner",
    "StructuredResponseError",
    "build_payload",
    "extract_content",
    "parse_json_text",
]
