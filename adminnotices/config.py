"""Settings from ADMIN_NOTICES_* environment variables."""
import logging
import os
import secrets

from adminnotices.models import Settings

log = logging.getLogger("adminnotices.config")

_PREFIX = "ADMIN_NOTICES_"


def _env(name: str, default: str) -> str:
    return os.environ.get(_PREFIX + name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(_PREFIX + name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("%s%s=%r is not an integer, using %d", _PREFIX, name, raw, default)
        return default


def load_settings() -> Settings:
    store = _env("STORE", "memory").lower()
    if store not in ("memory", "configmap"):
        log.warning("Unknown store backend %r, falling back to memory", store)
        store = "memory"

    level = _env("LOG_LEVEL", "INFO").upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        log.warning("Unknown log level %r, using INFO", level)
        level = "INFO"

    secret_key = os.environ.get(_PREFIX + "SECRET_KEY", "")
    if not secret_key:
        # Sessions and nonces will not survive a restart.
        secret_key = secrets.token_hex(32)
        log.warning("%sSECRET_KEY not set, generated a per-process key", _PREFIX)

    return Settings(
        secret_key=secret_key,
        notices_key=_env("KEY", "admin_notices"),
        store=store,
        namespace=_env("NAMESPACE", "default"),
        configmap=_env("CONFIGMAP", "admin-notices"),
        nonce_max_age=_env_int("NONCE_MAX_AGE", 86400),
        log_level=level,
        host=_env("HOST", "0.0.0.0"),
        port=_env_int("PORT", 8000),
    )
