"""Closed catalog of supported service capabilities."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping

from .errors import UnknownCapabilityError
from .models import CapabilityConfig


class Capability(str, Enum):
    """Identifiers accepted on the command line, lowercase."""

    SENSO = "senso"
    AIRIA = "airia"
    OPENAI = "openai"
    INTERCOM = "intercom"
    ELEVENLABS = "elevenlabs"
    SENTRY = "sentry"
    SNOWFLAKE = "snowflake"
    REDPANDA = "redpanda"
    TRUEFOUNDRY = "truefoundry"
    STRIPE = "stripe"
    TWILIO = "twilio"
    SEGMENT = "segment"


_INTERCOM_SETUP = """
// For web applications, add this to your HTML:
/*
<script>
  window.intercomSettings = {
    api_base: process.env.INTERCOM_API_BASE,
    app_id: process.env.INTERCOM_APP_ID,
    user_id: currentUser.id,
    name: currentUser.name,
    email: currentUser.email,
    created_at: currentUser.createdAt
  };
</script>
<script src="https://widget.intercom.io/widget/{app_id}"></script>
*/

// For Node.js/server-side:
import Intercom from 'intercom-client';
const client = new Intercom.Client({ token: process.env.INTERCOM_ACCESS_TOKEN });
"""


def _config(
    name: str,
    description: str,
    dependencies: Iterable[str],
    env_vars: Mapping[str, str],
    *,
    setup_notes: str | None = None,
    web_only: bool = False,
) -> CapabilityConfig:
    return CapabilityConfig(
        name=name,
        description=description,
        dependencies=tuple(dependencies),
        env_vars=MappingProxyType(dict(env_vars)),
        setup_notes=setup_notes,
        web_only=web_only,
    )


CATALOG: Mapping[Capability, CapabilityConfig] = MappingProxyType(
    {
        Capability.SENSO: _config(
            "Senso",
            "Event tracking and analytics API",
            ["axios"],
            {"SENSO_API_KEY": "<your-api-key>", "SENSO_BASE_URL": "https://sdk.senso.ai/api/v1"},
        ),
        Capability.AIRIA: _config(
            "Airia",
            "AI-powered data analysis API",
            ["axios"],
            {"AIRIA_TOKEN": "<your-token>", "AIRIA_BASE_URL": "https://api.airia.ai/v1"},
        ),
        Capability.OPENAI: _config(
            "OpenAI",
            "AI language models and embeddings",
            ["openai"],
            {"OPENAI_API_KEY": "<your-api-key>"},
        ),
        Capability.INTERCOM: _config(
            "Intercom",
            "Customer messaging and support platform",
            ["intercom-client"],
            {
                "INTERCOM_APP_ID": "<your-workspace-id>",
                "INTERCOM_ACCESS_TOKEN": "<your-access-token>",
                # api.eu.intercom.io / api.au.intercom.io for regional workspaces
                "INTERCOM_API_BASE": "https://api.intercom.io",
            },
            setup_notes=_INTERCOM_SETUP,
        ),
        Capability.ELEVENLABS: _config(
            "ElevenLabs",
            "Text-to-speech synthesis API",
            ["elevenlabs"],
            {"ELEVEN_API_KEY": "<your-api-key>", "ELEVEN_VOICE_ID": "Rachel"},
        ),
        Capability.SENTRY: _config(
            "Sentry",
            "Error tracking and performance monitoring",
            ["@sentry/node", "@sentry/tracing"],
            {"SENTRY_DSN": "https://<key>@<org>.ingest.sentry.io/<project>"},
        ),
        Capability.SNOWFLAKE: _config(
            "Snowflake",
            "Cloud data warehouse",
            ["snowflake-sdk"],
            {
                "SNOWFLAKE_USER": "<user>",
                "SNOWFLAKE_PASSWORD": "<password>",
                "SNOWFLAKE_ACCOUNT": "<account.region>",
                "SNOWFLAKE_WAREHOUSE": "COMPUTE_WH",
                "SNOWFLAKE_DATABASE": "DEMO_DB",
                "SNOWFLAKE_SCHEMA": "PUBLIC",
            },
        ),
        Capability.REDPANDA: _config(
            "Redpanda",
            "Streaming data platform",
            ["kafkajs"],
            {"REDPANDA_BROKERS": "localhost:9092", "REDPANDA_TOPIC": "events.demo"},
        ),
        Capability.TRUEFOUNDRY: _config(
            "TrueFoundry",
            "ML model deployment platform",
            ["axios"],
            {
                "TRUEFOUNDRY_ENDPOINT": "https://your-control-plane.truefoundry.com/api/llm",
                "TRUEFOUNDRY_TOKEN": "<token>",
            },
        ),
        Capability.STRIPE: _config(
            "Stripe",
            "Payment processing platform",
            ["stripe"],
            {
                "STRIPE_SECRET_KEY": "sk_test_...",
                "STRIPE_PUBLISHABLE_KEY": "pk_test_...",
                "STRIPE_WEBHOOK_SECRET": "whsec_...",
            },
        ),
        Capability.TWILIO: _config(
            "Twilio",
            "Communication APIs (SMS, Voice, Video)",
            ["twilio"],
            {
                "TWILIO_ACCOUNT_SID": "<your-account-sid>",
                "TWILIO_AUTH_TOKEN": "<your-auth-token>",
                "TWILIO_PHONE_NUMBER": "+1234567890",
            },
        ),
        Capability.SEGMENT: _config(
            "Segment",
            "Customer data platform",
            ["analytics-node"],
            {"SEGMENT_WRITE_KEY": "<your-write-key>"},
        ),
    }
)

_missing = [member.value for member in Capability if member not in CATALOG]
if _missing:  # pragma: no cover - guarded at import time
    raise RuntimeError(f"Capability catalog is missing entries for: {', '.join(_missing)}")


def supported_capabilities() -> List[str]:
    """Return every capability identifier in declaration order."""
    return [member.value for member in Capability]


def resolve_capabilities(names: Iterable[str]) -> List[Capability]:
    """Validate identifiers up front, returning catalog members in request order.

    Raises UnknownCapabilityError listing every invalid identifier when any
    name is not part of the catalog; nothing is returned in that case.
    """
    requested = list(names)
    invalid = [name for name in requested if name.strip().lower() not in _BY_VALUE]
    if invalid:
        raise UnknownCapabilityError(invalid, supported_capabilities())
    return [_BY_VALUE[name.strip().lower()] for name in requested]


def get_config(capability: Capability) -> CapabilityConfig:
    return CATALOG[capability]


_BY_VALUE = {member.value: member for member in Capability}


__all__ = [
    "CATALOG",
    "Capability",
    "get_config",
    "resolve_capabilities",
    "supported_capabilities",
]
