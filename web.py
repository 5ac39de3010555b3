import os

from flask import Response, jsonify, request, send_file
from werkzeug.exceptions import HTTPException
from werkzeug.security import safe_join


def read_json_body():
    # malformed JSON and non-objects read as {}
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return {}
    return data


def error(message, status):
    return jsonify({"error": message}), status


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        message = "Not found" if e.code == 404 else e.name
        return error(message, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error("Internal server error", 500)


def _plain(text, status):
    return Response(text, status=status, mimetype="text/plain")


def serve_static(public_dir, path):
    public_dir = os.path.abspath(public_dir)
    index_path = os.path.join(public_dir, "index.html")

    if not path or path == "/":
        file_path = index_path
    else:
        file_path = safe_join(public_dir, path)
        if file_path is None:
            return _plain("403 Forbidden", 403)

    if not os.path.isfile(file_path):
        # client-side routing
        file_path = index_path
        if not os.path.isfile(file_path):
            return _plain("404 Not Found", 404)

    return send_file(file_path)


ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def register_static_routes(app, api_prefixes=("api",)):
    @app.route("/", defaults={"path": ""}, methods=ANY_METHOD)
    @app.route("/<path:path>", methods=ANY_METHOD)
    def static_files(path):
        if request.method not in ("GET", "HEAD") or path.startswith(api_prefixes):
            return error("Not found", 404)
        return serve_static(app.config["PUBLIC_DIR"], path)
