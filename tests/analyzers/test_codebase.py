"""Tests for the combined codebase analyzer."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from wireup.analyzers import CodebaseAnalyzer, load_context_snippets
from wireup.models import CodebaseInfo
from tests._fixtures.repo_builder import RepoBuilder


def test_analyzer_classifies_typescript_react_app(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": '{"dependencies": {"react": "18", "express": "4"}}',
            "src/index.ts": "export {};\n",
            "src/app.js": "module.exports = {};\n",
            "index.ts": "import './src';\n",
        }
    )

    info = repo_builder.analyze()

    assert info == CodebaseInfo(
        language="typescript",
        framework="React",
        entry_points=("index.ts", "src/index.ts"),
        is_web_app=True,
        has_static_typing=True,
    )


def test_analyzer_is_deterministic(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": '{"devDependencies": {"fastify": "4"}}',
            "server.js": "require('fastify')();\n",
            "lib/util.js": "",
            "scripts/tool.py": "",
        }
    )

    first = repo_builder.analyze()
    second = repo_builder.analyze()

    assert first == second
    assert repr(first) == repr(second)
    assert first.framework == "Fastify"
    assert first.is_web_app is False


def test_analyzer_ignores_dependency_caches_and_hidden_dirs(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "node_modules/pkg/index.ts": "",
            ".cache/tool.ts": "",
            "dist/bundle.ts": "",
            "app.py": "print('hi')\n",
        }
    )

    info = repo_builder.analyze()

    assert info.language == "python"
    assert info.has_static_typing is False
    assert info.entry_points == ("app.py",)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_analyzer_does_not_follow_symlink_cycles(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/main.go": "package main\n"})
    root = repo_builder.path()
    try:
        (root / "src" / "loop").symlink_to(root, target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlinks here")

    info = repo_builder.analyze()

    assert info.language == "go"


def test_malformed_manifest_yields_no_framework(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": "{not json", "index.js": ""})

    info = repo_builder.analyze()

    assert info.language == "javascript"
    assert info.framework is None
    assert info.entry_points == ("index.js",)


def test_framework_override_sets_framework_and_web_flag(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": '{"dependencies": {"express": "4"}}', "app.js": ""})

    info = CodebaseAnalyzer().analyze(repo_builder.path(), framework_override="Vue")
    auto = CodebaseAnalyzer().analyze(repo_builder.path(), framework_override="auto")

    assert info.framework == "Vue"
    assert info.is_web_app is True
    assert auto.framework == "Express"


def test_empty_directory_has_no_language(tmp_path: Path) -> None:
    info = CodebaseAnalyzer().analyze(tmp_path)

    assert info.language is None
    assert info.entry_points == ()
    assert info.is_web_app is False


def test_context_snippets_truncate_and_include_tsconfig(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "index.ts": "a" * 2500,
            "app.ts": "b",
            "server.ts": "c",
            "package.json": '{"name": "demo"}',
            "tsconfig.json": '{"compilerOptions": {}}',
        }
    )
    info = repo_builder.analyze()

    snippets = load_context_snippets(repo_builder.path(), info)

    assert list(snippets) == ["index.ts", "app.ts", "package.json", "tsconfig.json"]
    assert len(snippets["index.ts"]) == 2000


def test_context_snippets_skip_tsconfig_for_untyped(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"index.js": "x", "tsconfig.json": "{}"})
    info = repo_builder.analyze()

    snippets = load_context_snippets(repo_builder.path(), info)

    assert list(snippets) == ["index.js"]
