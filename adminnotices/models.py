from dataclasses import dataclass
from typing import Literal, get_args

NoticeType = Literal["error", "warning", "success", "info"]
NOTICE_TYPES: tuple[str, ...] = get_args(NoticeType)

ERROR: NoticeType = "error"
WARNING: NoticeType = "warning"
SUCCESS: NoticeType = "success"
INFO: NoticeType = "info"


@dataclass(frozen=True)
class Notice:
    """
    One message queued for display in the admin panel.

    type        — one of NOTICE_TYPES
    dismissible — render a close control that posts a dismiss request
    unique      — take part in duplicate suppression (see NoticeQueue.add)
    persistent  — survive sweeps until removed by code
    code        — removal key; always set on persistent notices
    """
    type: NoticeType
    message: str
    dismissible: bool = False
    unique: bool = False
    persistent: bool = False
    code: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "Notice":
        if not isinstance(d, dict):
            raise TypeError(f"notice must be a dict, got {type(d).__name__}")
        if d.get("type") not in NOTICE_TYPES:
            raise ValueError(f"unknown notice type {d.get('type')!r}")
        code = d.get("code")
        return cls(
            type=d["type"],
            message=str(d["message"]),
            dismissible=bool(d.get("dismissible", False)),
            unique=bool(d.get("unique", False)),
            persistent=bool(d.get("persistent", False)),
            code=None if code is None else str(code),
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "dismissible": self.dismissible,
            "unique": self.unique,
            "persistent": self.persistent,
            "code": self.code,
        }

    def matches(self, type: str, message: str, code: str | None) -> bool:
        return self.type == type and self.message == message and self.code == code


@dataclass
class Settings:
    """Runtime settings, populated once by config.load_settings()."""
    secret_key: str = ""
    notices_key: str = "admin_notices"
    store: Literal["memory", "configmap"] = "memory"
    namespace: str = "default"
    configmap: str = "admin-notices"
    nonce_max_age: int = 86400
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def to_dict(self):
        return {
            "notices_key": self.notices_key,
            "store": self.store,
            "namespace": self.namespace,
            "configmap": self.configmap,
            "nonce_max_age": self.nonce_max_age,
            "log_level": self.log_level,
            "host": self.host,
            "port": self.port,
        }
