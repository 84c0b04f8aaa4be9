"""Tests for the capability catalog."""

from __future__ import annotations

import pytest

from wireup.catalog import CATALOG, Capability, resolve_capabilities, supported_capabilities
from wireup.errors import UnknownCapabilityError


def test_every_capability_has_a_config() -> None:
    assert set(CATALOG) == set(Capability)
    for config in CATALOG.values():
        assert config.name
        assert config.dependencies


def test_supported_capabilities_follow_declaration_order() -> None:
    supported = supported_capabilities()

    assert supported[:3] == ["senso", "airia", "openai"]
    assert len(supported) == len(Capability)


def test_resolve_normalizes_case_and_whitespace() -> None:
    assert resolve_capabilities([" Stripe", "OPENAI "]) == [Capability.STRIPE, Capability.OPENAI]


def test_resolve_reports_every_invalid_name() -> None:
    with pytest.raises(UnknownCapabilityError) as excinfo:
        resolve_capabilities(["openai", "not-a-real-api", "nope"])

    error = excinfo.value
    assert error.invalid == ["not-a-real-api", "nope"]
    assert error.supported == supported_capabilities()
    assert "not-a-real-api" in str(error)
    assert "segment" in str(error)
    assert isinstance(error, ValueError)


def test_catalog_is_read_only() -> None:
    with pytest.raises(TypeError):
        CATALOG[Capability.OPENAI] = CATALOG[Capability.STRIPE]  # type: ignore[index]
    with pytest.raises(TypeError):
        CATALOG[Capability.OPENAI].env_vars["OPENAI_API_KEY"] = "x"  # type: ignore[index]
