"""Code generation collaborator: turns capability descriptors into source text."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from .config import RunContext
from .errors import GenerationError
from .llm.runner import OPENAI_BASE_URL, LLMRunner, ModelSettings
from .logging import get_logger
from .models import CapabilityConfig, CodebaseInfo
from .prompting.builder import PromptBuilder


class IntegrationGenerator(Protocol):
    """Contract the plan builder relies on. Output is treated as opaque text."""

    def generate_module(
        self,
        capability_id: str,
        config: CapabilityConfig,
        info: CodebaseInfo,
        context: Mapping[str, str],
    ) -> str: ...

    def generate_usage(
        self,
        capability_names: Sequence[str],
        info: CodebaseInfo,
        module_paths: Sequence[str],
    ) -> str: ...


class LLMIntegrationGenerator:
    """Default generator backed by a chat-completion model."""

    def __init__(
        self,
        runner: LLMRunner,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.runner = runner
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("generator")

    @classmethod
    def from_context(cls, context: RunContext) -> "LLMIntegrationGenerator":
        """Build the default runner; a key without an endpoint targets OpenAI."""
        llm = context.config.llm
        api_key = llm.api_key or context.secrets.llm_api_key()
        base_url = llm.base_url or (OPENAI_BASE_URL if api_key else None)
        defaults = ModelSettings()
        settings = ModelSettings(
            model=llm.model or defaults.model,
            base_url=base_url,
            api_key=api_key,
            temperature=defaults.temperature if llm.temperature is None else llm.temperature,
            max_tokens=llm.max_tokens or defaults.max_tokens,
            request_timeout=llm.request_timeout or defaults.request_timeout,
        )
        return cls(LLMRunner(settings))

    def generate_module(
        self,
        capability_id: str,
        config: CapabilityConfig,
        info: CodebaseInfo,
        context: Mapping[str, str],
    ) -> str:
        request = self.prompt_builder.module_prompt(config, info, context)
        self.logger.debug("Requesting %s module (%d prompt chars)", capability_id, len(request.prompt))
        try:
            return self.runner.run(request.prompt, system=request.system)
        except RuntimeError as exc:
            raise GenerationError(config.name, str(exc)) from exc

    def generate_usage(
        self,
        capability_names: Sequence[str],
        info: CodebaseInfo,
        module_paths: Sequence[str],
    ) -> str:
        request = self.prompt_builder.usage_prompt(capability_names, info, module_paths)
        try:
            return self.runner.run(request.prompt, system=request.system)
        except RuntimeError as exc:
            raise GenerationError("usage demo", str(exc)) from exc


__all__ = ["IntegrationGenerator", "LLMIntegrationGenerator"]
