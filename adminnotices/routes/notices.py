import logging

from flask import Blueprint, current_app, jsonify, request

from adminnotices.nonce import verify_nonce

log = logging.getLogger("adminnotices.routes.notices")

bp = Blueprint("admin_notices", __name__, url_prefix="/admin-ajax")


def _queue():
    return current_app.extensions["admin_notices"].get_queue()


def _payload() -> dict:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


def _nonce(data: dict):
    return data.get("_ajax_nonce") or request.headers.get("X-Notice-Nonce", "")


def _reply(success: bool, data, status: int = 200):
    return jsonify({"success": success, "data": data}), status


@bp.route("/dismiss-notice", methods=["POST"])
def dismiss():
    data = _payload()

    # Nothing is read from the body until the nonce checks out.
    if not verify_nonce(_nonce(data)):
        log.warning("Dismiss rejected: bad or missing nonce from %s", request.remote_addr)
        return _reply(False, "-1", 403)

    code = data.get("code")
    if not isinstance(code, str) or not code:
        return _reply(False, "A notice code is required.", 400)

    if _queue().remove(code):
        log.info("Notice %s dismissed", code)
        return _reply(True, f"Notice {code} dismissed.")
    return _reply(False, f"Notice {code} could not be dismissed.")


@bp.route("/notices")
def list_notices():
    if not verify_nonce(_nonce(request.args)):
        return _reply(False, "-1", 403)
    return _reply(True, [n.to_dict() for n in _queue().notices()])
