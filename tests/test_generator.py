"""Tests for the model-backed integration generator."""

from __future__ import annotations

from pathlib import Path

import pytest

from wireup.catalog import CATALOG, Capability
from wireup.config import LLMConfig, RunContext, SecretStore, WireupConfig
from wireup.errors import GenerationError
from wireup.generator import LLMIntegrationGenerator
from wireup.llm.runner import OPENAI_BASE_URL, LLMRunner, ModelError, ModelSettings
from wireup.models import CodebaseInfo

INFO = CodebaseInfo(language="javascript", framework="Express")


def test_generate_module_sends_rendered_prompt() -> None:
    seen = []

    def fake(settings, messages):  # type: ignore[no-untyped-def]
        seen.append(messages)
        return "module.exports = {};"

    generator = LLMIntegrationGenerator(LLMRunner(transport=fake))

    code = generator.generate_module("twilio", CATALOG[Capability.TWILIO], INFO, {})

    assert code == "module.exports = {};"
    assert "Twilio" in seen[0][1]["content"]
    assert seen[0][0]["content"].startswith("You are an expert software engineer")


def test_runner_failure_becomes_generation_error() -> None:
    def failing(settings, messages):  # type: ignore[no-untyped-def]
        raise ModelError("http://localhost answered 500: boom")

    generator = LLMIntegrationGenerator(LLMRunner(transport=failing))

    with pytest.raises(GenerationError) as excinfo:
        generator.generate_usage(["Twilio"], INFO, ["integrations/twilioIntegration.js"])

    assert "usage demo" in str(excinfo.value)
    assert "boom" in str(excinfo.value)


def test_from_context_uses_config_and_secrets(tmp_path: Path) -> None:
    context = RunContext(
        config=WireupConfig(
            root=tmp_path,
            llm=LLMConfig(model="gpt-4o-mini", temperature=0.1, max_tokens=99),
        ),
        secrets=SecretStore(
            {"api_keys": {"openai": {"enabled": True, "api_key": "sk-secret"}}}, environ={}
        ),
    )

    generator = LLMIntegrationGenerator.from_context(context)

    assert generator.runner.settings.model == "gpt-4o-mini"
    assert generator.runner.settings.api_key == "sk-secret"
    assert generator.runner.settings.base_url == OPENAI_BASE_URL
    assert generator.runner.settings.temperature == 0.1
    assert generator.runner.settings.max_tokens == 99


def test_from_context_without_key_uses_local_cli(tmp_path: Path) -> None:
    context = RunContext(config=WireupConfig(root=tmp_path), secrets=SecretStore(environ={}))

    settings = LLMIntegrationGenerator.from_context(context).runner.settings

    assert settings == ModelSettings()
    assert settings.endpoint is None


def test_from_context_keeps_configured_endpoint(tmp_path: Path) -> None:
    context = RunContext(
        config=WireupConfig(
            root=tmp_path,
            llm=LLMConfig(model="qwen", base_url="http://localhost:11434/v1", temperature=0.0),
        ),
        secrets=SecretStore(environ={}),
    )

    settings = LLMIntegrationGenerator.from_context(context).runner.settings

    assert settings.endpoint == "http://localhost:11434/v1/chat/completions"
    assert settings.api_key is None
    assert settings.temperature == 0.0
