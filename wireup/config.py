"""Configuration loading for wireup (.wireup.yml and the secrets file)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigError
from .logging import get_logger
from .models import ServiceCredentials

logger = get_logger("config")

CONFIG_FILENAME = ".wireup.yml"
SECRETS_FILENAME = "config.secret.json"
EXAMPLE_SECRETS_FILENAME = "config.example.json"

# Secrets-file field -> environment variable overrides, per service.
ENV_MAPPINGS: Dict[str, Dict[str, str]] = {
    "openai": {"api_key": "OPENAI_API_KEY", "organization_id": "OPENAI_ORG_ID"},
    "senso": {"api_key": "SENSO_API_KEY", "base_url": "SENSO_BASE_URL"},
    "airia": {"token": "AIRIA_TOKEN", "base_url": "AIRIA_BASE_URL"},
    "intercom": {
        "app_id": "INTERCOM_APP_ID",
        "access_token": "INTERCOM_ACCESS_TOKEN",
        "api_base": "INTERCOM_API_BASE",
        "identity_verification_secret": "INTERCOM_SECRET",
    },
    "stripe": {
        "secret_key": "STRIPE_SECRET_KEY",
        "publishable_key": "STRIPE_PUBLISHABLE_KEY",
        "webhook_secret": "STRIPE_WEBHOOK_SECRET",
    },
    "twilio": {
        "account_sid": "TWILIO_ACCOUNT_SID",
        "auth_token": "TWILIO_AUTH_TOKEN",
        "phone_number": "TWILIO_PHONE_NUMBER",
    },
    "segment": {"write_key": "SEGMENT_WRITE_KEY"},
    "sentry": {"dsn": "SENTRY_DSN", "environment": "SENTRY_ENVIRONMENT"},
    "elevenlabs": {"api_key": "ELEVEN_API_KEY", "voice_id": "ELEVEN_VOICE_ID"},
    "snowflake": {
        "user": "SNOWFLAKE_USER",
        "password": "SNOWFLAKE_PASSWORD",
        "account": "SNOWFLAKE_ACCOUNT",
        "warehouse": "SNOWFLAKE_WAREHOUSE",
        "database": "SNOWFLAKE_DATABASE",
        "schema": "SNOWFLAKE_SCHEMA",
    },
    "redpanda": {"brokers": "REDPANDA_BROKERS", "topic": "REDPANDA_TOPIC"},
    "truefoundry": {"endpoint": "TRUEFOUNDRY_ENDPOINT", "token": "TRUEFOUNDRY_TOKEN"},
}

_PLACEHOLDER_MARKERS = ("REPLACE", "your-")

# Model settings read from the environment when .wireup.yml leaves them unset,
# first match wins. The OpenAI key itself is resolved through SecretStore.
LLM_ENV_FALLBACKS: Dict[str, tuple[str, ...]] = {
    "model": ("WIREUP_LLM_MODEL", "OPENAI_MODEL"),
    "base_url": ("WIREUP_LLM_BASE_URL", "OPENAI_BASE_URL"),
    "api_key": ("WIREUP_LLM_API_KEY",),
}


@dataclass
class LLMConfig:
    """Generation model settings from .wireup.yml."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class GitConfig:
    """Branch, remote and authorship settings for the commit workflow."""

    remote: str = "origin"
    branch_prefix: str = "integration-"
    author_name: Optional[str] = None
    author_email: Optional[str] = None


@dataclass
class WorkspaceConfig:
    """Where working copies are cloned and whether they are retained."""

    base_dir: Optional[Path] = None
    keep: bool = False


@dataclass
class WireupConfig:
    """Represents the settings defined in .wireup.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    git: GitConfig = field(default_factory=GitConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> WireupConfig:
    """Load configuration from disk, returning defaults when the file is absent.

    Model, base URL and key left unset in the file are filled from
    ``LLM_ENV_FALLBACKS``; ``environ`` defaults to :data:`os.environ`.
    """
    environ = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return WireupConfig(root=root, llm=_llm_from_environment(LLMConfig(), environ))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )
    llm = _llm_from_environment(llm, environ)

    git_data = _as_dict(data.get("git"))
    git = GitConfig(
        remote=_as_str(git_data.get("remote")) or "origin",
        branch_prefix=_as_str(git_data.get("branch_prefix")) or "integration-",
        author_name=_as_str(git_data.get("author_name")),
        author_email=_as_str(git_data.get("author_email")),
    )

    workspace_data = _as_dict(data.get("workspace"))
    base_dir_str = _as_str(workspace_data.get("base_dir"))
    workspace = WorkspaceConfig(
        base_dir=(root / base_dir_str).resolve() if base_dir_str else None,
        keep=bool(workspace_data.get("keep", False)),
    )

    return WireupConfig(root=root, llm=llm, git=git, workspace=workspace)


def _llm_from_environment(llm: LLMConfig, environ: Mapping[str, str]) -> LLMConfig:
    for attr, keys in LLM_ENV_FALLBACKS.items():
        if getattr(llm, attr):
            continue
        value = next((environ[key] for key in keys if environ.get(key)), None)
        if value:
            setattr(llm, attr, value)
    return llm


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


# ----------------------------------------------------------------------
# Secrets


@dataclass
class SecretsReport:
    """Readiness of every service in the secrets file."""

    ready: List[str] = field(default_factory=list)
    disabled: List[str] = field(default_factory=list)
    placeholders: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)


class SecretStore:
    """Service credentials from the secrets file, overridden by the environment."""

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        path: Path | None = None,
    ) -> None:
        payload = dict(data or {})
        self.path = path
        self._api_keys: Dict[str, Dict[str, Any]] = {
            str(name).lower(): dict(entry)
            for name, entry in _as_dict(payload.get("api_keys")).items()
            if isinstance(entry, dict)
        }
        self.environment = _as_str(payload.get("current_environment")) or "development"
        self._environ = environ if environ is not None else os.environ

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        search_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "SecretStore":
        """Read the secrets file, preferring config.secret.json over the example."""
        resolved = path or _find_secrets_file(search_dir or Path.cwd())
        if resolved is None:
            logger.debug("No secrets file found; relying on environment variables")
            return cls(environ=environ)
        try:
            text = resolved.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read {resolved}: {exc}") from exc
        cleaned = "\n".join(
            line for line in text.splitlines() if not line.strip().startswith("//")
        )
        try:
            data = json.loads(cleaned) if cleaned.strip() else {}
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {resolved.name}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{resolved.name} must contain a JSON object")
        return cls(data, environ=environ, path=resolved)

    def names(self) -> List[str]:
        return list(self._api_keys)

    def enabled(self) -> List[str]:
        return [name for name, entry in self._api_keys.items() if entry.get("enabled")]

    def get(self, name: str) -> ServiceCredentials | None:
        """Return credentials for an enabled service, or None."""
        key = name.lower()
        entry = self._api_keys.get(key)
        if entry is None:
            logger.debug("Service '%s' not found in secrets", key)
            return None
        if not entry.get("enabled"):
            logger.debug("Service '%s' is disabled in secrets", key)
            return None

        credentials: Dict[str, str] = {}
        mapping = ENV_MAPPINGS.get(key, {})
        for field_name, value in entry.items():
            if field_name.startswith("//") or field_name == "enabled":
                continue
            env_var = mapping.get(field_name)
            if env_var and self._environ.get(env_var):
                credentials[field_name] = self._environ[env_var]
            elif value is not None:
                credentials[field_name] = str(value)

        return ServiceCredentials(
            name=key,
            enabled=True,
            credentials=credentials,
            base_url=credentials.get("base_url") or credentials.get("api_base"),
            environment=self.environment,
        )

    def llm_api_key(self) -> str | None:
        """Resolve the key used by the generation model."""
        openai = self.get("openai")
        if openai and openai.credentials.get("api_key"):
            key = openai.credentials["api_key"]
            if not _is_placeholder(key):
                return key
        return self._environ.get("OPENAI_API_KEY") or None

    def validate(self) -> SecretsReport:
        report = SecretsReport()
        for name, entry in self._api_keys.items():
            if not entry.get("enabled"):
                report.disabled.append(name)
                continue
            has_issues = False
            for field_name, value in entry.items():
                if field_name.startswith("//") or field_name == "enabled":
                    continue
                if value is None or value == "":
                    report.missing.append(f"{name}.{field_name}")
                    has_issues = True
                elif isinstance(value, str) and (_is_placeholder(value) or value == "sk-..."):
                    report.placeholders.append(f"{name}.{field_name}")
                    has_issues = True
            if not has_issues:
                report.ready.append(name)
        return report

    def export_env(self, name: str | None = None) -> str:
        """Render enabled credentials as KEY=value lines, skipping placeholders."""
        if name is not None:
            services = [name.lower()] if name.lower() in self._api_keys else []
        else:
            services = self.enabled()

        lines: List[str] = []
        for service in services:
            creds = self.get(service)
            if creds is None:
                continue
            lines.append(f"# {service.upper()} Configuration")
            mapping = ENV_MAPPINGS.get(service, {})
            for field_name, value in creds.credentials.items():
                env_var = mapping.get(field_name) or f"{service.upper()}_{field_name.upper()}"
                if value and not _is_placeholder(value):
                    lines.append(f"{env_var}={value}")
            lines.append("")
        return "\n".join(lines)


def _find_secrets_file(directory: Path) -> Path | None:
    secret = directory / SECRETS_FILENAME
    if secret.exists():
        return secret
    example = directory / EXAMPLE_SECRETS_FILENAME
    if example.exists():
        logger.warning(
            "Using %s - copy it to %s and add your keys",
            EXAMPLE_SECRETS_FILENAME,
            SECRETS_FILENAME,
        )
        return example
    return None


def _is_placeholder(value: str) -> bool:
    return any(marker in value for marker in _PLACEHOLDER_MARKERS)


# ----------------------------------------------------------------------
# Run context


@dataclass
class RunContext:
    """Settings and secrets constructed once per process and passed explicitly."""

    config: WireupConfig
    secrets: SecretStore = field(default_factory=SecretStore)

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        secrets_path: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> "RunContext":
        config = load_config(config_path or Path.cwd(), environ=environ)
        secrets = SecretStore.load(secrets_path, search_dir=config.root, environ=environ)
        return cls(config=config, secrets=secrets)

    @classmethod
    def default(cls, root: Path | None = None) -> "RunContext":
        return cls(config=WireupConfig(root=(root or Path.cwd()).resolve()))


# ----------------------------------------------------------------------
# Coercion helpers


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


__all__ = [
    "ConfigError",
    "GitConfig",
    "LLMConfig",
    "RunContext",
    "SecretStore",
    "SecretsReport",
    "WireupConfig",
    "WorkspaceConfig",
    "load_config",
]
