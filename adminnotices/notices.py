"""
The admin notice queue.

Any backend code holding the app's NoticeQueue can call add_error() and friends
to surface a message on the next admin page load. Notices are kept as one
list under a single store key; every write replaces the whole list.

Transient notices are shown once: the render hook calls display() and then
sweep(), which keeps only persistent notices. Persistent notices stay until
remove(code) is called, normally from the dismiss endpoint.
"""
import logging
import threading
import warnings

from markupsafe import Markup

from adminnotices.models import ERROR, INFO, NOTICE_TYPES, SUCCESS, WARNING, Notice
from adminnotices.store import TransientStore

log = logging.getLogger("adminnotices.notices")

_LOG_LEVELS = {
    ERROR: logging.ERROR,
    WARNING: logging.WARNING,
    SUCCESS: logging.INFO,
    INFO: logging.INFO,
}

_NOTICE_HTML = Markup(
    '<div data-notice-type="{type}" data-notice-dismissible="{dismissible}" '
    'data-notice-code="{code}" class="{classes}"><p>{message}</p></div>'
)


class NoticeUsageWarning(UserWarning):
    """A notice API was called incorrectly. The call was ignored."""


def _usage_warning(message: str) -> None:
    # helper -> _add -> public add* method -> caller
    warnings.warn(message, NoticeUsageWarning, stacklevel=4)


class NoticeQueue:

    def __init__(self, store: TransientStore, key: str = "admin_notices"):
        self.store = store
        self.key = key
        self._lock = threading.Lock()

    # ── Reading ───────────────────────────────────────────────

    def _load(self) -> list[Notice] | None:
        """Return the stored queue, or None when the key is absent."""
        raw = self.store.get(self.key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            log.warning("Ignoring non-list value under %s: %r", self.key, raw)
            return []
        notices = []
        for entry in raw:
            try:
                notices.append(Notice.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                log.warning("Dropping malformed notice %r: %s", entry, exc)
        return notices

    def _save(self, notices: list[Notice]) -> bool:
        ok = self.store.set(self.key, [n.to_dict() for n in notices])
        log.debug("Wrote %d notice(s) to %s (ok=%s)", len(notices), self.key, ok)
        return ok

    def notices(self) -> list[Notice]:
        """Current queue contents, in insertion order."""
        return self._load() or []

    # ── Adding ────────────────────────────────────────────────

    def add(self, type: str, message: str, dismissible: bool = False,
            unique: bool = False, persistent: bool = False,
            code: str | None = None, log: bool = False) -> None:
        """
        Queue a notice for the next admin page load.

        type       — "error", "warning", "success" or "info"
        unique     — dropped when an already-queued notice is also unique
                     and shares type, message and code
        persistent — keep the notice across renders until remove(code)
        log        — also write "<TYPE>: <message>" to the application log

        Invalid arguments raise no exception: a NoticeUsageWarning is issued
        and nothing is queued.
        """
        self._add(type, message, dismissible, unique, persistent, code, log)

    def _add(self, type, message, dismissible, unique, persistent, code, log_line) -> None:
        # Only called straight from a public add* method; see _usage_warning.
        if not type:
            _usage_warning("No type was provided.")
            return
        if type not in NOTICE_TYPES:
            _usage_warning("Wrong type. Only the following types are allowed: "
                           "error, warning, success, and info.")
            return
        if not message:
            _usage_warning("No message was provided.")
            return
        if persistent and not code:
            _usage_warning("Persistent notices must contain a code.")
            return

        with self._lock:
            notices = self._load() or []
            for n in notices:
                if not (n.unique and unique):
                    continue
                if n.matches(type, message, code):
                    return
            notices.append(Notice(type=type, message=message, dismissible=dismissible,
                                  unique=unique, persistent=persistent, code=code))
            self._save(notices)

        if log_line:
            log.log(_LOG_LEVELS[type], "%s: %s", type.upper(), message)

    def add_error(self, message, dismissible=False, unique=False, persistent=False, code=None, log=False):
        self._add(ERROR, message, dismissible, unique, persistent, code, log)

    def add_warning(self, message, dismissible=False, unique=False, persistent=False, code=None, log=False):
        self._add(WARNING, message, dismissible, unique, persistent, code, log)

    def add_success(self, message, dismissible=False, unique=False, persistent=False, code=None, log=False):
        self._add(SUCCESS, message, dismissible, unique, persistent, code, log)

    def add_info(self, message, dismissible=False, unique=False, persistent=False, code=None, log=False):
        self._add(INFO, message, dismissible, unique, persistent, code, log)

    def add_persistent(self, type: str, code: str | None, message: str,
                       dismissible: bool = True, unique: bool = True, log: bool = False) -> None:
        """Queue a notice that survives sweeps. code is required; None is rejected."""
        self._add(type, message, dismissible, unique, True, code, log)

    def add_persistent_error(self, code, message, dismissible=True, unique=True, log=False):
        self._add(ERROR, message, dismissible, unique, True, code, log)

    def add_persistent_warning(self, code, message, dismissible=True, unique=True, log=False):
        self._add(WARNING, message, dismissible, unique, True, code, log)

    def add_persistent_success(self, code, message, dismissible=True, unique=True, log=False):
        self._add(SUCCESS, message, dismissible, unique, True, code, log)

    def add_persistent_info(self, code, message, dismissible=True, unique=True, log=False):
        self._add(INFO, message, dismissible, unique, True, code, log)

    # ── Removing ──────────────────────────────────────────────

    def remove(self, code: str) -> bool:
        """
        Drop every notice carrying this code.

        Returns False when the queue is absent or empty, otherwise the result
        of the store write (which happens even when nothing matched).
        """
        with self._lock:
            notices = self._load()
            if not notices:
                return False
            return self._save([n for n in notices if n.code != code])

    # ── Render cycle ──────────────────────────────────────────

    def display(self) -> Markup:
        """Render every queued notice as markup. Does not modify the queue."""
        blocks = []
        for n in self.notices():
            classes = f"notice notice-{n.type}"
            if n.dismissible:
                classes += " is-dismissible"
            blocks.append(_NOTICE_HTML.format(
                type=n.type,
                dismissible="true" if n.dismissible else "false",
                code=n.code or "",
                classes=classes,
                message=n.message,
            ))
        return Markup("").join(blocks)

    def sweep(self) -> None:
        """Discard everything that is not persistent."""
        with self._lock:
            notices = self._load()
            if not notices:
                return
            kept = [n for n in notices if n.persistent]
            self._save(kept)
            log.debug("Swept %d transient notice(s)", len(notices) - len(kept))
