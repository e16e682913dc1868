"""
adminnotices server entrypoint.

Loads settings from the environment, builds the store backend, constructs the
Flask app with the AdminNotices extension, and runs the dev server when
executed directly.
"""
import logging
import pathlib

from flask import Flask

from adminnotices.config import load_settings
from adminnotices.extension import AdminNotices
from adminnotices.models import Settings
from adminnotices.routes import ui as ui_bp
from adminnotices.store import TransientStore, make_store

log = logging.getLogger("adminnotices.server")

_TEMPLATES = pathlib.Path(__file__).parent / "templates"


def configure_logging(level_name: str = "INFO") -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )
    logging.getLogger().setLevel(getattr(logging, level_name.upper(), logging.INFO))


def create_app(settings: Settings | None = None, store: TransientStore | None = None) -> Flask:
    """
    Build the admin app. This is the only place AdminNotices is constructed;
    the instance is reachable as app.extensions["admin_notices"].
    """
    settings = settings or load_settings()
    app = Flask(__name__, template_folder=str(_TEMPLATES))
    app.config.update(
        SECRET_KEY=settings.secret_key,
        NONCE_MAX_AGE=settings.nonce_max_age,
        ADMIN_NOTICES_KEY=settings.notices_key,
    )

    AdminNotices(app, store=store if store is not None else make_store(settings))
    app.register_blueprint(ui_bp.bp)
    return app


if __name__ == "__main__":
    _settings = load_settings()
    configure_logging(_settings.log_level)
    log.info("Starting admin notices server: %s", _settings.to_dict())
    create_app(_settings).run(host=_settings.host, port=_settings.port)
