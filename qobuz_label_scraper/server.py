"""Local HTTP front end so the catalog app (or a browser page) can start a scrape.

    POST /run_scraper   {"appRootOverride": "...", "dryRun": false}
    GET  /progress      last progress event of the current/last run
    GET  /              server status
"""

from __future__ import annotations

import argparse
import logging
import threading
from datetime import datetime

from flask import Flask, jsonify, request
from flask_cors import CORS

from . import scraper
from .progress import ProgressEvent

log = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

_run_lock = threading.Lock()
last_progress: dict = {}


def _record_progress(event: ProgressEvent) -> None:
    global last_progress
    last_progress = event.to_dict()


@app.route("/run_scraper", methods=["POST"])
def run_scraper():
    """Run one scrape synchronously and return its result."""
    payload = request.get_json(silent=True) or {}
    if not _run_lock.acquire(blocking=False):
        return jsonify({"ok": False, "error": {
            "code": "ALREADY_RUNNING",
            "message": "Scraper już działa.",
            "details": {},
        }}), 409

    try:
        result = scraper.run(
            app_root=payload.get("appRootOverride"),
            dry_run=payload.get("dryRun") is True,
            on_progress=_record_progress,
        )
    except Exception as e:  # noqa: BLE001
        log.exception("Błąd scrapera")
        _record_progress(ProgressEvent(phase="error", message=str(e) or "Error", percent=100))
        return jsonify({"ok": False, "error": {
            "code": "UNEXPECTED_ERROR",
            "message": str(e) or "Nieoczekiwany błąd scrapera Qobuz.",
            "details": {},
        }}), 500
    finally:
        _run_lock.release()

    return jsonify(result.to_dict()), (200 if result.ok else 400)


@app.route("/progress", methods=["GET"])
def progress():
    return jsonify(last_progress or {"phase": "idle", "percent": 0, "message": ""})


@app.route("/", methods=["GET"])
def index_status():
    return {
        "status": "ok",
        "server": "Flask",
        "running": _run_lock.locked(),
        "message": "Serwer scrapera działa poprawnie",
        "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }, 200


def main() -> None:
    parser = argparse.ArgumentParser(description="HTTP front end for the Qobuz label scraper.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print(f"🚀 Serwer scrapera startuje na http://{args.host}:{args.port}")
    try:
        app.run(host=args.host, port=args.port)
    except KeyboardInterrupt:
        print("\n🧹 Serwer został zatrzymany przez użytkownika.")


if __name__ == "__main__":
    main()
