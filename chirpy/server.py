"""The Chirpy HTTP server."""

from __future__ import annotations

import argparse
import html
import logging
import os
import sqlite3
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

from dotenv import load_dotenv
from flask import Flask, Response, redirect, request, send_file

from chirpy.auth import check_password_hash, hash_password
from chirpy.database import Chirp, NotFoundError, Queries, User, connect
from chirpy.responses import respond_with_error, respond_with_json

logger = logging.getLogger(__name__)

BANNED_WORDS = ("kerfuffle", "sharbert", "fornax")
MAX_CHIRP_LENGTH = 140
DEFAULT_PORT = 8080
METRICS_PAGE = (
    "<html><body><h1>Welcome, Chirpy Admin</h1>"
    "<p>Chirpy has been visited {hits} times!</p></body></html>"
)
_TEXT_PLAIN = "text/plain; charset=utf-8"
_NIL_UUID = uuid.UUID(int=0)


@dataclass
class ApiConfig:
    """Shared server state: deployment platform, storage and hit counter."""

    platform: str
    queries: Queries
    file_server_hits: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def _record_hit(self) -> None:
        with self._lock:
            self.file_server_hits += 1

    def _reset_hits(self) -> None:
        with self._lock:
            self.file_server_hits = 0


def clean_bad_words(text: str) -> str:
    """Replace every space-separated banned word, in any case, with ``****``."""
    for word in text.split(" "):
        if word.lower() in BANNED_WORDS:
            text = text.replace(word, "****")
    return text


def _read_json_object() -> dict:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValueError("request body is not a JSON object")
    return data


def _string_field(data: dict, name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _uuid_field(data: dict, name: str) -> uuid.UUID:
    value = data.get(name)
    if value is None:
        return _NIL_UUID
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return uuid.UUID(value)


def _decoding_error(exc: Exception) -> Response:
    logger.error("Error decoding parameters: %s", exc)
    return Response(status=500)


def _user_json(user: User) -> dict:
    return {
        "id": user.id,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "email": user.email,
    }


def _chirp_json(chirp: Chirp) -> dict:
    return {
        "id": chirp.id,
        "created_at": chirp.created_at,
        "updated_at": chirp.updated_at,
        "body": chirp.body,
        "user_id": chirp.user_id,
    }


def _not_found() -> Response:
    return Response("404 page not found\n", status=404, content_type=_TEXT_PLAIN)


def _directory_listing(directory: Path) -> Response:
    lines = [
        "<!doctype html>",
        '<meta name="viewport" content="width=device-width">',
        "<pre>",
    ]
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        name = entry.name + ("/" if entry.is_dir() else "")
        lines.append(f'<a href="{quote(name)}">{html.escape(name)}</a>')
    lines.append("</pre>")
    return Response("\n".join(lines) + "\n", content_type="text/html; charset=utf-8")


def _serve_path(root: Path, filename: str) -> Response:
    if filename == "index.html" or filename.endswith("/index.html"):
        return redirect("./", code=301)
    target = (root / filename).resolve()
    if target != root and root not in target.parents:
        return _not_found()
    if target.is_dir():
        if not request.path.endswith("/"):
            return redirect(request.path.rsplit("/", 1)[-1] + "/", code=301)
        index = target / "index.html"
        if index.is_file():
            return send_file(index)
        return _directory_listing(target)
    if target.is_file():
        return send_file(target)
    return _not_found()


def create_app(config: ApiConfig, static_dir=".") -> Flask:
    """Build the web application around ``config``, serving files from ``static_dir``."""
    app = Flask(__name__)
    root = Path(static_dir).resolve()
    queries = config.queries

    @app.route("/app/", defaults={"filename": ""}, methods=["GET", "HEAD"])
    @app.route("/app/<path:filename>", methods=["GET", "HEAD"])
    def serve_static(filename: str):
        config._record_hit()
        return _serve_path(root, filename)

    @app.get("/admin/metrics")
    def metrics():
        page = METRICS_PAGE.format(hits=config.file_server_hits)
        return Response(page, content_type="text/html")

    @app.post("/admin/reset")
    def reset():
        if config.platform != "dev":
            return respond_with_error(403, "Forbidden")
        try:
            queries.remove_users()
        except sqlite3.Error as exc:
            logger.error("Error removing users: %s", exc)
            return Response(status=500)
        response = respond_with_json(200, "OK")
        config._reset_hits()
        return response

    @app.get("/api/healthz")
    def healthz():
        return Response("OK", status=200, content_type=_TEXT_PLAIN)

    @app.post("/api/users")
    def create_user():
        try:
            data = _read_json_object()
            email = _string_field(data, "email")
            password = _string_field(data, "password")
        except ValueError as exc:
            return _decoding_error(exc)
        try:
            hashed = hash_password(password)
        except ValueError as exc:
            logger.error("Error hashing password: %s", exc)
            return Response(status=500)
        try:
            user = queries.create_user(email, hashed)
        except sqlite3.Error as exc:
            logger.error("Error inserting user: %s", exc)
            return Response(status=500)
        return respond_with_json(201, _user_json(user))

    @app.post("/api/login")
    def login():
        try:
            data = _read_json_object()
            email = _string_field(data, "email")
            password = _string_field(data, "password")
        except ValueError as exc:
            return _decoding_error(exc)
        try:
            user = queries.get_user_password(email)
        except (NotFoundError, sqlite3.Error) as exc:
            logger.error("Error fetching user: %s", exc)
            return Response(status=500)
        try:
            check_password_hash(password, user.hashed_password)
        except ValueError:
            return Response("Unauthorized", status=401, content_type=_TEXT_PLAIN)
        return respond_with_json(200, _user_json(user))

    @app.post("/api/chirps")
    def create_chirp():
        try:
            data = _read_json_object()
            body = _string_field(data, "body")
            user_id = _uuid_field(data, "user_id")
        except ValueError as exc:
            return _decoding_error(exc)
        if len(body.encode("utf-8")) > MAX_CHIRP_LENGTH:
            return respond_with_error(400, "Chirp is too long")
        try:
            chirp = queries.create_chirp(clean_bad_words(body), user_id)
        except sqlite3.Error as exc:
            logger.error("Error inserting chirp: %s", exc)
            return Response(status=500)
        return respond_with_json(201, _chirp_json(chirp))

    @app.get("/api/chirps")
    def list_chirps():
        try:
            chirps = queries.get_chirps()
        except sqlite3.Error as exc:
            return respond_with_error(400, str(exc))
        return respond_with_json(200, [_chirp_json(chirp) for chirp in chirps])

    @app.get("/api/chirps/<chirp_id>")
    def get_chirp(chirp_id: str):
        try:
            ident = uuid.UUID(chirp_id)
        except ValueError as exc:
            return respond_with_error(400, str(exc))
        try:
            chirp = queries.get_chirp_by_id(ident)
        except NotFoundError:
            return respond_with_error(404, "not found")
        return respond_with_json(200, _chirp_json(chirp))

    return app


def main(argv=None) -> int:
    """Run the server until interrupted."""
    parser = argparse.ArgumentParser(prog="chirpy", description="Run the Chirpy server.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--static-dir", default=".")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    queries = Queries(connect(os.environ.get("DB_URL") or "chirpy.db"))
    queries.create_schema()
    config = ApiConfig(platform=os.environ.get("PLATFORM", ""), queries=queries)
    app = create_app(config, args.static_dir)
    logger.info("Serving on port: %s", args.port)
    app.run(host="0.0.0.0", port=args.port)
    return 0