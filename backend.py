# backend.py: Flask app serving the directory widget and its JSON API
from flask import (
    Flask,
    abort,
    request,
    jsonify,
    send_from_directory,
)
import os
from pydantic import BaseModel, ValidationError

from directory_feed import load_directory
from comp_directory.config import Settings, load_config
from comp_directory.ingest import DirectoryStore, FetchError
from comp_directory.logger import get_logger
from comp_directory.pipeline import apply_query, find_record, goto_page, load_state, render_item, render_page

log = get_logger("backend")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PUBLIC_DIR = os.environ.get("PUBLIC_DIR", os.path.join(BASE_DIR, "public"))

app = Flask(__name__, static_folder=PUBLIC_DIR, static_url_path="")
app.config["MAX_CONTENT_LENGTH"] = 64 * 1024  # contact form only

SETTINGS = Settings()
CONFIG = load_config()
store = DirectoryStore(SETTINGS.csv_url, timeout=SETTINGS.fetch_timeout, loader=load_directory)

LOAD_ERROR = "Could not load the directory. Please refresh."
GENERIC_ERROR = "Something went wrong!"


class ContactMessage(BaseModel):
    name: str = ""
    email: str = ""
    message: str = ""


def elevated_view() -> bool:
    token = SETTINGS.admin_view_token
    return bool(token) and request.headers.get("X-Admin-Token") == token


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def current_state():
    """Current batch as an AppState; loads once on first use."""
    generation, records = store.snapshot()
    if generation == 0:
        generation, records = store.refresh()
    return load_state(
        records,
        page_size=SETTINGS.page_size,
        mode=SETTINGS.search_mode,
        generation=generation,
        config=CONFIG,
    )


@app.errorhandler(FetchError)
def fetch_failed(e):
    log.warning("Directory unavailable: %s", e)
    return jsonify({"error": LOAD_ERROR}), 502


@app.route("/", methods=["GET"])
def index():
    return send_from_directory(PUBLIC_DIR, "index.html")


@app.get("/api/records")
def records():
    mode = (request.args.get("mode") or SETTINGS.search_mode).lower()
    if mode not in ("exact", "fuzzy"):
        abort(400)
    state = apply_query(
        current_state(),
        query=request.args.get("q", ""),
        mode=mode,
        category=request.args.get("type", ""),
        config=CONFIG,
    )
    state = goto_page(state, _int_arg("page", 1))
    payload = render_page(
        state,
        config=CONFIG,
        elevated=elevated_view(),
        base_url=SETTINGS.link_base_url,
    )
    return jsonify(payload.model_dump())


@app.get("/api/records/<rec_id>")
def record_detail(rec_id: str):
    state = current_state()
    canon = find_record(state, rec_id, config=CONFIG)
    if canon is None:
        abort(404)
    item = render_item(
        canon,
        query=request.args.get("q", ""),
        config=CONFIG,
        elevated=elevated_view(),
        base_url=SETTINGS.link_base_url,
    )
    return jsonify(item.model_dump())


@app.post("/api/refresh")
def refresh():
    generation, records = store.refresh()
    return jsonify({"ok": True, "generation": generation, "count": len(records)})


@app.post("/api/contact")
def contact():
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        return jsonify({"message": GENERIC_ERROR}), 400
    try:
        msg = ContactMessage.model_validate(payload)
    except ValidationError:
        return jsonify({"message": GENERIC_ERROR}), 400
    log.info("Received contact from %r <%s>", msg.name, msg.email)
    return jsonify({"message": f"Thanks for contacting us, {msg.name}!"})


@app.get("/healthz")
def healthz():
    return "ok", 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 3000)), debug=False)
