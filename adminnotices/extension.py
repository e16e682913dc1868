"""
Flask wiring for the notice queue.

AdminNotices is the one object an app constructs to get admin notices:

    notices = AdminNotices(app, store=MemoryStore())
    notices.get_queue(app).add_error("Disk full", dismissible=True, code="disk-full")

init_app() registers

  * admin_notices()         — template global: render the queue, then sweep it
  * admin_notices_script()  — template global: inline dismiss script + nonce
  * the /admin-ajax blueprint (dismiss endpoint)

and records itself in app.extensions["admin_notices"], with the app's own
NoticeQueue under app.extensions["admin_notices.queue"]. One AdminNotices
may be wired into several apps; each keeps its own key.
"""
import json
import logging
import warnings

from flask import Flask, current_app, has_app_context, url_for
from markupsafe import Markup

from adminnotices.nonce import DISMISS_ACTION, create_nonce
from adminnotices.notices import NoticeQueue, NoticeUsageWarning
from adminnotices.routes import notices as notices_routes
from adminnotices.store import MemoryStore, TransientStore

log = logging.getLogger("adminnotices.extension")

EXTENSION_KEY = "admin_notices"
QUEUE_KEY = "admin_notices.queue"
MAX_KEY_LENGTH = 172

_SCRIPT = """<script>
document.addEventListener("DOMContentLoaded", function () {
  var cfg = %(config)s;
  document.querySelectorAll('[data-notice-dismissible="true"]').forEach(function (el) {
    var code = el.dataset.noticeCode;
    var button = el.querySelector("button.notice-dismiss");
    if (!button) {
      button = document.createElement("button");
      button.type = "button";
      button.className = "notice-dismiss";
      button.setAttribute("aria-label", "Dismiss this notice.");
      el.appendChild(button);
    }
    button.addEventListener("click", function () {
      el.style.display = "none";
      if (!code) { return; }
      var body = new URLSearchParams({action: cfg.action, _ajax_nonce: cfg.nonce, code: code});
      fetch(cfg.url, {method: "POST", body: body, credentials: "same-origin"})
        .catch(function (err) { console.error(err); });
    });
  });
});
</script>"""


class AdminNotices:

    def __init__(self, app: Flask | None = None, store: TransientStore | None = None,
                 key: str | None = None):
        self.store = store if store is not None else MemoryStore()
        self.key = key
        if app is not None:
            self.init_app(app)

    def is_initialized(self, app: Flask | None = None) -> bool:
        if app is None:
            if not has_app_context():
                return False
            app = current_app
        return app.extensions.get(EXTENSION_KEY) is self

    def get_queue(self, app: Flask | None = None) -> NoticeQueue:
        """The queue wired into app, or into the current app when none is given."""
        app = app or current_app
        return app.extensions[QUEUE_KEY]

    @property
    def queue(self) -> NoticeQueue:
        return self.get_queue()

    def init_app(self, app: Flask) -> None:
        if EXTENSION_KEY in app.extensions:
            warnings.warn("AdminNotices has already been initialized.",
                          NoticeUsageWarning, stacklevel=2)
            return

        key = self.key if self.key is not None else app.config.get("ADMIN_NOTICES_KEY", "admin_notices")
        if not isinstance(key, str):
            warnings.warn("key must be a valid string.", NoticeUsageWarning, stacklevel=2)
            return
        if len(key) > MAX_KEY_LENGTH:
            warnings.warn(f"key must be {MAX_KEY_LENGTH} characters or fewer in length.",
                          NoticeUsageWarning, stacklevel=2)
            return

        app.extensions[QUEUE_KEY] = NoticeQueue(self.store, key)
        app.add_template_global(self.render_notices, "admin_notices")
        app.add_template_global(self.render_script, "admin_notices_script")
        app.register_blueprint(notices_routes.bp)
        app.extensions[EXTENSION_KEY] = self
        log.info("Admin notices wired to key %r (%s)", key, type(self.store).__name__)

    def render_notices(self) -> Markup:
        """Page-render hook: show the queue, then drop the transient notices."""
        queue = self.get_queue()
        html = queue.display()
        queue.sweep()
        return html

    def render_script(self) -> Markup:
        config = {
            "url": url_for("admin_notices.dismiss"),
            "nonce": create_nonce(DISMISS_ACTION),
            "action": DISMISS_ACTION,
        }
        # Keep "</" out of the inline JSON.
        payload = json.dumps(config).replace("</", "<\\/")
        return Markup(_SCRIPT % {"config": payload})
