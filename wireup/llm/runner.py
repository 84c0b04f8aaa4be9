"""Model transports that turn a rendered prompt into integration source text.

Two transports are shipped: an OpenAI-compatible ``/chat/completions``
endpoint over HTTP, and a local ``ollama run`` subprocess used when no
endpoint is configured. :class:`ModelSettings` arrives fully resolved from the
run context; this module never consults the environment.
"""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger

DEFAULT_MODEL = "gpt-4"
OPENAI_BASE_URL = "https://api.openai.com/v1"

Messages = List[Dict[str, str]]

logger = get_logger("llm")


class ModelError(RuntimeError):
    """Raised when a transport cannot produce usable source text."""


@dataclass(frozen=True)
class ModelSettings:
    """Resolved parameters for one model endpoint."""

    model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 2000
    request_timeout: float = 120.0
    executable: str = "ollama"

    @property
    def endpoint(self) -> Optional[str]:
        if not self.base_url:
            return None
        return f"{self.base_url.rstrip('/')}/chat/completions"


Transport = Callable[[ModelSettings, Messages], str]


class LLMRunner:
    """Sends one system + user exchange and returns the reply as source text."""

    def __init__(
        self,
        settings: ModelSettings | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        self.settings = settings or ModelSettings()
        if transport is None:
            transport = chat_completion if self.settings.endpoint else ollama_run
        self._transport = transport

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Return the reply with whitespace and any wrapping code fence removed.

        Raises :class:`ModelError` when the transport fails or the reply has no
        source text left once unwrapped.
        """
        messages: Messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        logger.debug("Calling %s (%d prompt chars)", self.settings.model, len(prompt))
        source = strip_code_fence(self._transport(self.settings, messages))
        if not source:
            raise ModelError(f"{self.settings.model} returned no source text")
        return source


def chat_completion(settings: ModelSettings, messages: Messages) -> str:
    endpoint = settings.endpoint
    if endpoint is None:
        raise ModelError("No chat-completion endpoint configured")
    body = json.dumps(
        {
            "model": settings.model,
            "messages": messages,
            "temperature": settings.temperature,
            "max_tokens": settings.max_tokens,
        }
    ).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if settings.api_key:
        headers["Authorization"] = f"Bearer {settings.api_key}"

    request = Request(endpoint, data=body, headers=headers, method="POST")
    try:
        with urlopen(request, timeout=settings.request_timeout) as response:
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore").strip()
        raise ModelError(f"{endpoint} answered {exc.code}: {detail or exc.reason}") from exc
    except URLError as exc:
        raise ModelError(f"Could not reach {endpoint}: {exc.reason}") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ModelError(f"{endpoint} returned a body that is not JSON") from exc
    return _first_choice(payload)


def ollama_run(settings: ModelSettings, messages: Messages) -> str:
    args = [settings.executable, "run", settings.model]
    for message in messages:
        if message["role"] == "system":
            args.extend(["--system", message["content"]])
    args.append(messages[-1]["content"])
    try:
        completed = subprocess.run(
            args,
            check=False,
            capture_output=True,
            text=True,
            timeout=settings.request_timeout,
        )
    except FileNotFoundError as exc:
        raise ModelError(
            f"'{settings.executable}' is not installed; configure llm.base_url or an API key"
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise ModelError(f"{settings.executable} timed out after {settings.request_timeout}s") from exc
    if completed.returncode != 0:
        raise ModelError(
            f"{settings.executable} exited with {completed.returncode}: {completed.stderr.strip()}"
        )
    return completed.stdout


def strip_code_fence(text: str) -> str:
    """Drop a single markdown fence wrapped around the whole reply."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.splitlines()
    body = lines[1:]
    if body and body[-1].strip() == "```":
        body = body[:-1]
    return "\n".join(body).strip()


def _first_choice(payload: Any) -> str:
    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


__all__ = [
    "DEFAULT_MODEL",
    "LLMRunner",
    "ModelError",
    "ModelSettings",
    "OPENAI_BASE_URL",
    "chat_completion",
    "ollama_run",
    "strip_code_fence",
]
