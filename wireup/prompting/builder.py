"""Builds generation prompts from Jinja templates."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import CapabilityConfig, CodebaseInfo

MAX_CONTEXT_FILES = 3
MAX_CONTEXT_CHARS = 1000


@dataclass(frozen=True)
class PromptRequest:
    """A rendered system/user prompt pair ready for the model runner."""

    system: str
    prompt: str


class PromptBuilder:
    """Renders the capability-module and usage-demo prompts."""

    MODULE_SYSTEM_PROMPT = (
        "You are an expert software engineer who writes clean, production-ready "
        "TypeScript/JavaScript code."
    )
    USAGE_SYSTEM_PROMPT = (
        "You are an expert software engineer who writes practical, production-ready code."
    )

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)

    def module_prompt(
        self,
        capability: CapabilityConfig,
        info: CodebaseInfo,
        context: Mapping[str, str],
    ) -> PromptRequest:
        typed = _is_typed(info)
        template = self._env.get_template("module.j2")
        prompt = template.render(
            capability=capability,
            info=info,
            typed=typed,
            language_label="TypeScript" if typed else "JavaScript",
            env_vars_json=json.dumps(dict(capability.env_vars), indent=2),
            context=self.format_context(context),
        )
        return PromptRequest(system=self.MODULE_SYSTEM_PROMPT, prompt=prompt.strip())

    def usage_prompt(
        self,
        capability_names: Sequence[str],
        info: CodebaseInfo,
        module_paths: Sequence[str],
    ) -> PromptRequest:
        template = self._env.get_template("usage.j2")
        prompt = template.render(
            capability_names=list(capability_names),
            info=info,
            typed=_is_typed(info),
            modules_json=json.dumps(list(module_paths), indent=2),
        )
        return PromptRequest(system=self.USAGE_SYSTEM_PROMPT, prompt=prompt.strip())

    @staticmethod
    def format_context(context: Mapping[str, str]) -> List[Dict[str, str]]:
        """Keep the first three snippets, each capped at 1000 characters."""
        formatted: List[Dict[str, str]] = []
        for path, content in list(context.items())[:MAX_CONTEXT_FILES]:
            if len(content) > MAX_CONTEXT_CHARS:
                content = content[:MAX_CONTEXT_CHARS] + "\n... (truncated)"
            formatted.append({"path": path, "content": content})
        return formatted

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )


def _is_typed(info: CodebaseInfo) -> bool:
    return info.has_static_typing or info.language == "typescript"


__all__ = ["PromptBuilder", "PromptRequest"]
