"""Writes an IntegrationPlan onto disk under an output root."""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath
from typing import List

from .logging import get_logger
from .models import IntegrationPlan

DEPENDENCIES_FILE = "package_additions.json"
ENV_TEMPLATE_FILE = ".env.example"
NOTES_FILE = "INTEGRATION_NOTES.md"
SETUP_FILE = "SETUP.md"

AUXILIARY_ARTIFACTS = (ENV_TEMPLATE_FILE, DEPENDENCIES_FILE, NOTES_FILE, SETUP_FILE)


class PlanPersister:
    """Materializes file changes and the auxiliary artifacts of a plan.

    Existing files at the same paths are overwritten, so persisting the same
    plan twice leaves the tree unchanged. Auxiliary artifacts are only
    written when the collection backing them is non-empty.
    """

    def __init__(self) -> None:
        self.logger = get_logger("persister")

    def persist(self, plan: IntegrationPlan, root: Path) -> List[str]:
        """Write the plan under ``root`` and return the relative paths written."""
        root = Path(root)
        root.mkdir(parents=True, exist_ok=True)
        written: List[str] = []

        for change in plan.changes:
            target = root / _checked_relative(change.path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(change.updated, encoding="utf-8")
            self.logger.debug("Wrote %s", change.path)
            written.append(change.path)

        if plan.dependencies:
            payload = {"dependencies": {name: "latest" for name in plan.dependencies}}
            self._write(root, DEPENDENCIES_FILE, json.dumps(payload, indent=2), written)

        if plan.env_placeholders:
            lines = [f"{key}={value}" for key, value in plan.env_placeholders.items()]
            self._write(root, ENV_TEMPLATE_FILE, "\n".join(lines) + "\n", written)

        if plan.notes:
            bullets = "\n".join(f"- {note}" for note in plan.notes)
            self._write(root, NOTES_FILE, f"# API Integration Notes\n\n{bullets}\n", written)

        if plan.setup_instructions:
            body = "\n\n".join(plan.setup_instructions)
            self._write(root, SETUP_FILE, f"# Setup Instructions\n\n{body}\n", written)

        self.logger.info("Persisted %d files under %s", len(written), root)
        return written

    def _write(self, root: Path, name: str, content: str, written: List[str]) -> None:
        (root / name).write_text(content, encoding="utf-8")
        written.append(name)


def _checked_relative(path: str) -> PurePosixPath:
    candidate = PurePosixPath(path)
    if candidate.is_absolute() or ".." in candidate.parts or not candidate.parts:
        raise ValueError(f"File change path must stay inside the output root: {path!r}")
    return candidate


__all__ = ["AUXILIARY_ARTIFACTS", "PlanPersister"]
