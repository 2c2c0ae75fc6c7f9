"""Configuration loader for storage, security, and service settings."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from coverdrop_app.core.crypto import CryptoService


@dataclass(frozen=True)
class DatabaseConfig:
    path: str
    key_env: str
    allow_sqlite_fallback: bool


@dataclass(frozen=True)
class EncryptionConfig:
    key_env: str


@dataclass(frozen=True)
class LoggingConfig:
    retention_days: int
    level: str = "INFO"
    format: str = "json"


@dataclass(frozen=True)
class ClaimsConfig:
    """Empty adjudicators means any caller may process claims."""

    adjudicators: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class NotificationConfig:
    fanout_mode: str = "sync"
    fanout_workers: int = 2


@dataclass(frozen=True)
class ApiConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    encryption: EncryptionConfig
    logging: LoggingConfig
    claims: ClaimsConfig = field(default_factory=ClaimsConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


FANOUT_MODES = {"sync", "background"}
DEFAULT_CONFIG_REL_PATH = Path("config/service.yaml")
CONFIG_PATH_ENV = "COVERDROP_CONFIG_PATH"
DEFAULT_DB_KEY_ENV = "COVERDROP_DB_KEY"
DEFAULT_ENCRYPTION_KEY_ENV = "COVERDROP_ENCRYPTION_KEY"
RUNTIME_ENV_REL_PATH = Path("config/runtime.env")
_RUNTIME_ENV_LOADED = False


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _split_key_value(raw_line: str) -> tuple[str, str] | None:
    """Parse a shell or PowerShell key assignment line."""
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None

    for prefix in ("$env:", "export "):
        if line.startswith(prefix):
            line = line[len(prefix) :]
            break

    key, sep, value = line.partition("=")
    key = key.strip()
    value = value.strip()
    if not sep or not key:
        return None

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    return key, value


def _iter_env_candidates() -> list[Path]:
    """Return candidate files that may contain runtime keys."""
    unique: list[Path] = []
    for root in (Path.cwd(), _project_root()):
        for candidate in (root / ".env.local", root / RUNTIME_ENV_REL_PATH):
            resolved = candidate.resolve()
            if resolved not in unique:
                unique.append(resolved)
    return unique


def _load_env_from_file(path: Path) -> None:
    """Load KEY=VALUE lines into the process environment without overriding."""
    if not path.is_file():
        return
    with path.open("r", encoding="utf-8") as file:
        for line in file:
            parsed = _split_key_value(line)
            if parsed and parsed[0] not in os.environ:
                os.environ[parsed[0]] = parsed[1]


def _runtime_env_path() -> Path:
    return _project_root() / RUNTIME_ENV_REL_PATH


def _write_runtime_env(db_key: str, encryption_key: str) -> None:
    path = _runtime_env_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f"{DEFAULT_DB_KEY_ENV}='{db_key}'\n{DEFAULT_ENCRYPTION_KEY_ENV}='{encryption_key}'\n",
        encoding="utf-8",
    )


def _ensure_runtime_env_loaded() -> None:
    """Load local env files once per process."""
    global _RUNTIME_ENV_LOADED
    if _RUNTIME_ENV_LOADED:
        return
    for path in _iter_env_candidates():
        _load_env_from_file(path)
    _RUNTIME_ENV_LOADED = True


def _bootstrap_default_keys_if_needed(config_db_path: str | None = None) -> None:
    """Generate keys on first run; refuse when a database exists without them."""
    db_key = os.getenv(DEFAULT_DB_KEY_ENV)
    encryption_key = os.getenv(DEFAULT_ENCRYPTION_KEY_ENV)
    if db_key and encryption_key:
        return

    if config_db_path and Path(config_db_path).exists() and not _runtime_env_path().exists():
        raise RuntimeError(
            "Runtime key file is missing while database file exists. "
            f"Restore key file or set {DEFAULT_DB_KEY_ENV}/{DEFAULT_ENCRYPTION_KEY_ENV}."
        )

    db_key = db_key or secrets.token_urlsafe(48)
    encryption_key = encryption_key or CryptoService.generate_base64_key()
    os.environ[DEFAULT_DB_KEY_ENV] = db_key
    os.environ[DEFAULT_ENCRYPTION_KEY_ENV] = encryption_key
    _write_runtime_env(db_key, encryption_key)


def ensure_runtime_keys(config_db_path: str | None = None) -> None:
    """Ensure runtime keys are loaded or bootstrapped for a configured DB path."""
    _ensure_runtime_env_loaded()
    _bootstrap_default_keys_if_needed(config_db_path)


def get_required_env(name: str) -> str:
    """Return a required environment variable or raise a clear error."""
    _ensure_runtime_env_loaded()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Required environment variable is missing: {name}")
    return value


def resolve_default_config_path() -> Path:
    """Resolve configuration path from env, cwd, or the project root."""
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    candidates = [Path.cwd() / DEFAULT_CONFIG_REL_PATH, _project_root() / DEFAULT_CONFIG_REL_PATH]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


def parse_config(raw: dict) -> AppConfig:
    """Build an AppConfig from a parsed YAML mapping."""
    logging_raw = raw.get("logging") or {}
    claims_raw = raw.get("claims") or {}
    notifications_raw = raw.get("notifications") or {}
    api_raw = raw.get("api") or {}

    fanout_mode = str(notifications_raw.get("fanout_mode", "sync"))
    if fanout_mode not in FANOUT_MODES:
        raise RuntimeError(f"Unsupported notifications.fanout_mode: {fanout_mode}")

    return AppConfig(
        database=DatabaseConfig(
            path=str(raw["db"]["path"]),
            key_env=str(raw["db"].get("key_env", DEFAULT_DB_KEY_ENV)),
            allow_sqlite_fallback=bool(raw["db"].get("allow_sqlite_fallback", False)),
        ),
        encryption=EncryptionConfig(
            key_env=str(raw.get("encryption", {}).get("key_env", DEFAULT_ENCRYPTION_KEY_ENV)),
        ),
        logging=LoggingConfig(
            retention_days=int(logging_raw.get("retention_days", 1095)),
            level=str(logging_raw.get("level", "INFO")),
            format=str(logging_raw.get("format", "json")),
        ),
        claims=ClaimsConfig(
            adjudicators=frozenset(str(item) for item in claims_raw.get("adjudicators") or []),
        ),
        notifications=NotificationConfig(
            fanout_mode=fanout_mode,
            fanout_workers=int(notifications_raw.get("fanout_workers", 2)),
        ),
        api=ApiConfig(
            host=str(api_raw.get("host", "127.0.0.1")),
            port=int(api_raw.get("port", 8000)),
        ),
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the app configuration from YAML."""
    path = config_path or resolve_default_config_path()
    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file) or {}
    return parse_config(raw)
