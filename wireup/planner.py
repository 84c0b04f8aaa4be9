"""Assembles an IntegrationPlan from analyzer output and generated modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from .catalog import Capability, get_config, resolve_capabilities
from .config import RunContext
from .errors import GenerationError, PlanConflictError, WireupError
from .generator import IntegrationGenerator, LLMIntegrationGenerator
from .logging import get_logger
from .models import CodebaseInfo, FileChange, IntegrationPlan

INTEGRATIONS_DIR = "integrations"
DEMO_MODULE = "integrationDemo"
INDEX_MODULE = "index"


def file_extension(info: CodebaseInfo) -> str:
    return "ts" if info.has_static_typing else "js"


def module_path(capability_id: str, info: CodebaseInfo) -> str:
    return f"{INTEGRATIONS_DIR}/{capability_id}Integration.{file_extension(info)}"


def render_index(capability_ids: Sequence[str], typed: bool) -> str:
    """Barrel module re-exporting every generated integration plus the demo."""
    header = "// API Integration Exports\n" if typed else "/** API Integration Exports */\n"
    exports = "\n".join(f"export * from './{cid}Integration';" for cid in capability_ids)
    return f"{header}\n{exports}\n\nexport {{ default as demo }} from './{DEMO_MODULE}';\n"


@dataclass
class _PlanDraft:
    """Mutable accumulator used while capabilities are processed."""

    changes: List[FileChange] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    env_placeholders: Dict[str, str] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)
    setup_instructions: List[str] = field(default_factory=list)

    def add_change(self, change: FileChange) -> None:
        if any(existing.path == change.path for existing in self.changes):
            raise PlanConflictError(f"Two file changes target the same path: {change.path}")
        self.changes.append(change)

    def freeze(self, selected: Sequence[str]) -> IntegrationPlan:
        return IntegrationPlan(
            changes=tuple(self.changes),
            dependencies=tuple(dict.fromkeys(self.dependencies)),
            env_placeholders=self.env_placeholders,
            notes=tuple(self.notes),
            setup_instructions=tuple(self.setup_instructions),
            selected_capabilities=tuple(selected),
        )


class PlanBuilder:
    """Drives the generation collaborator once per capability, in request order."""

    def __init__(
        self,
        context: RunContext | None = None,
        generator: IntegrationGenerator | None = None,
    ) -> None:
        self.context = context or RunContext.default()
        self.generator = generator or LLMIntegrationGenerator.from_context(self.context)
        self.logger = get_logger("planner")

    def build(
        self,
        info: CodebaseInfo,
        capability_ids: Sequence[str],
        context_snippets: Mapping[str, str] | None = None,
    ) -> IntegrationPlan:
        """Return the finalized plan; raises before any generation on unknown ids."""
        capabilities = self._unique(resolve_capabilities(capability_ids))
        selected = [capability.value for capability in capabilities]
        snippets = dict(context_snippets or {})
        draft = _PlanDraft()

        for capability in capabilities:
            config = get_config(capability)
            self.logger.info("Generating %s integration", config.name)
            code = self._call(
                config.name,
                self.generator.generate_module,
                capability.value,
                config,
                info,
                snippets,
            )
            draft.add_change(
                FileChange(
                    path=module_path(capability.value, info),
                    updated=code,
                    description=f"{config.name} integration module",
                )
            )
            draft.dependencies.extend(config.dependencies)
            for key, value in config.env_vars.items():
                if value:
                    draft.env_placeholders[key] = value
            if config.setup_notes:
                draft.setup_instructions.append(f"{config.name}: {config.setup_notes}")
            if config.web_only and not info.is_web_app:
                draft.notes.append(
                    f"{config.name} targets browser applications but no web app was detected"
                )

        ext = file_extension(info)
        self.logger.info("Generating usage example")
        module_paths = [change.path for change in draft.changes]
        display_names = [get_config(capability).name for capability in capabilities]
        usage = self._call(
            "usage demo", self.generator.generate_usage, display_names, info, module_paths
        )
        draft.add_change(
            FileChange(
                path=f"{INTEGRATIONS_DIR}/{DEMO_MODULE}.{ext}",
                updated=usage,
                description="Integration usage example",
            )
        )
        draft.add_change(
            FileChange(
                path=f"{INTEGRATIONS_DIR}/{INDEX_MODULE}.{ext}",
                updated=render_index(selected, info.has_static_typing),
                description="Integration exports",
            )
        )

        draft.notes[:0] = self._summary_notes(selected, info)
        draft.notes.append("Remember to set all environment variables before running")
        return draft.freeze(selected)

    def _call(self, target: str, func, *args):  # type: ignore[no-untyped-def]
        try:
            return func(*args)
        except WireupError:
            raise
        except Exception as exc:
            raise GenerationError(target, str(exc)) from exc

    def _unique(self, capabilities: Sequence[Capability]) -> List[Capability]:
        unique = list(dict.fromkeys(capabilities))
        if len(unique) != len(capabilities):
            self.logger.warning("Ignoring repeated capabilities in request")
        return unique

    @staticmethod
    def _summary_notes(selected: Sequence[str], info: CodebaseInfo) -> List[str]:
        language = info.language or "unknown"
        if info.has_static_typing:
            language += " (TypeScript)"
        notes = [
            f"Generated integrations for: {', '.join(selected)}",
            f"Target language: {language}",
        ]
        if info.framework:
            notes.append(f"Framework detected: {info.framework}")
        if info.is_web_app:
            notes.append("Web application detected - generated browser-compatible code where applicable")
        return notes


__all__ = ["PlanBuilder", "file_extension", "module_path", "render_index"]
