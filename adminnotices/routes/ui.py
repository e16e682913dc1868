"""UI routes — the server-rendered admin dashboard."""
import logging

from flask import Blueprint, render_template

log = logging.getLogger("adminnotices.routes.ui")

bp = Blueprint("ui", __name__)


@bp.route("/")
def index():
    return render_template("admin/dashboard.html", title="Admin")
