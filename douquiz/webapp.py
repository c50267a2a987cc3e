"""A small web application for previewing and exporting quiz documents."""

from __future__ import annotations

import json
import uuid
import zipfile
from pathlib import Path

from flask import Flask, Response, request

from douquiz.document import extract_media
from douquiz.dou import convert_path
from douquiz.fluid import parse_to_fluid
from douquiz.questions import Question, iter_questions

_EXTENSION_TYPES = {
    "js": "text/javascript",
    "css": "text/css",
    "ico": "image/x-icon",
}

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
)

_HTML_OPENINGS = (
    b"<!doctype html",
    b"<html",
    b"<head",
    b"<body",
    b"<script",
    b"<title",
    b"<div",
    b"<p",
    b"<!--",
)

_API_METHODS = ["GET", "POST", "PUT"]


def detect_content_type(path: str) -> str:
    """Return the content type fixed by the file extension, or ``""``."""
    return _EXTENSION_TYPES.get(path.split(".")[-1], "")


def _sniff(data: bytes) -> str:
    if data[:12].startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    for signature, content_type in _SIGNATURES:
        if data.startswith(signature):
            return content_type
    head = data.lstrip(b" \t\r\n").lower()
    if head.startswith(_HTML_OPENINGS):
        return "text/html; charset=utf-8"
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def _is_plain_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


def generate_questions(path: str, media_dir) -> list[Question]:
    """Extract the media of the document at ``path`` and parse its questions.

    Raises InvalidDocxError when the document cannot be read.
    """
    path = convert_path(str(path))
    try:
        Path(media_dir).mkdir(parents=True, exist_ok=True)
        extract_media(path, media_dir)
    except (OSError, zipfile.BadZipFile):
        pass
    return list(iter_questions(parse_to_fluid(path)))


def create_app(root="app") -> Flask:
    """Build the application serving files from the directory ``root``."""
    base = Path(root)
    frontend = base / "frontend"
    media_dir = base / "media"
    uploads = base / "tests"

    app = Flask(__name__)

    def read(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except OSError:
            return None

    def serve(path: Path, type_name: str) -> Response:
        data = read(path)
        if data is None:
            return Response(b"", content_type=_sniff(b""))
        content_type = detect_content_type(type_name) or _sniff(data)
        return Response(data, content_type=content_type)

    def page(directory: str) -> Response:
        data = read(frontend / directory / "index.html") or b""
        return Response(data, content_type=_sniff(data))

    def resource(directory: str, name: str) -> Response:
        if not _is_plain_name(name):
            return Response(b"", content_type=_sniff(b""))
        return serve(frontend / directory / name, name)

    @app.route("/LivePreview", methods=_API_METHODS)
    def live_preview():
        return page("livePreview")

    @app.route("/LivePreview/<name>")
    def live_preview_resource(name):
        return resource("livePreview", name)

    @app.route("/LivePreview/API/<name>", methods=_API_METHODS)
    def live_preview_api(name):
        if name != "genJson":
            return Response(b"", content_type=_sniff(b""))
        payload = request.get_json(force=True, silent=True)
        path = payload.get("path", "") if isinstance(payload, dict) else ""
        if not isinstance(path, str):
            path = ""
        response = {"status": False, "error": "", "questions": None}
        try:
            questions = generate_questions(path, media_dir)
        except ValueError as exc:
            response["error"] = str(exc)
        else:
            response["status"] = True
            response["questions"] = [q.to_dict() for q in questions] or None
        body = json.dumps(response, ensure_ascii=False) + "\n"
        return Response(body.encode("utf-8"), content_type="application/json")

    @app.route("/favicon.ico")
    def favicon():
        return serve(base / "icon.ico", "icon.ico")

    @app.route("/media/<name>")
    def media(name):
        if not _is_plain_name(name):
            return Response(b"")
        data = read(media_dir / name)
        if data is None:
            return Response(b"")
        content_type = detect_content_type(name) or _sniff(data)
        return Response(data, content_type=content_type)

    @app.route("/Home", methods=_API_METHODS)
    def home():
        return page("home")

    @app.route("/Home/<name>")
    def home_resource(name):
        return resource("home", name)

    @app.route("/Export", methods=_API_METHODS)
    def export_page():
        return page("export")

    @app.route("/Export/<name>")
    def export_resource(name):
        return resource("export", name)

    @app.route("/Export/API/<name>", methods=_API_METHODS)
    def export_api(name):
        if name == "upload":
            upload_id = request.headers.get("uuid", "")
            if not _is_plain_name(upload_id):
                return Response(b"invalid upload id", status=400, content_type="text/plain")
            uploads.mkdir(parents=True, exist_ok=True)
            (uploads / f"{upload_id}.dat").write_bytes(request.get_data())
            return Response(b"", content_type=_sniff(b""))
        if name == "genUUID":
            return Response(str(uuid.uuid4()).encode("ascii"), content_type="text/plain")
        return Response(b"", content_type=_sniff(b""))

    return app


def run(root="app", host: str = "localhost", port: int = 8080) -> None:
    """Serve the application until interrupted."""
    print(f"dia chi web app: http://{host}:{port}")
    create_app(root).run(host=host, port=port)