import hashlib
import logging
import sqlite3

from flask import Flask, g, jsonify, request
from flask_cors import CORS

import config
from db import DatabaseNotConfigured, close_db, database_path, get_db, init_db, row_to_dict
from sessions import InMemorySessionStore, create_session
from web import error, read_json_body, register_error_handlers, register_static_routes

app = Flask(__name__)
app.config.update(config.flask_config())
app.config["SESSION_STORE"] = InMemorySessionStore()
CORS(app)
register_error_handlers(app)


@app.errorhandler(DatabaseNotConfigured)
def database_not_configured(e):
    return error("Database not configured", 500)


# DB lifecycle
@app.before_request
def initialize_database_once():
    if app.config["DATABASE_URL"] and not app.config.get("DB_INITIALIZED"):
        try:
            init_db()
        except DatabaseNotConfigured as e:
            app.logger.warning("Skipping database initialisation: %s", e)
            return
        app.config["DB_INITIALIZED"] = True


@app.teardown_appcontext
def teardown_db(exception):
    close_db()


# Helpers
def hash_password(password):
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def sessions():
    return app.config["SESSION_STORE"]


def bearer_token():
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def token_required(fn):
    def wrapper(*args, **kwargs):
        token = bearer_token()
        user_id = sessions().get(token) if token else None
        if user_id is None:
            return error("Unauthorized", 401)
        g.user_id = user_id
        return fn(*args, **kwargs)
    wrapper.__name__ = fn.__name__
    return wrapper


def is_text(value):
    return isinstance(value, str) and value != ""


def like_pattern(text):
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# Health
@app.route("/api/health")
def health():
    try:
        database_path(app.config["DATABASE_URL"])
        connected = True
    except DatabaseNotConfigured:
        connected = False
    return jsonify({"status": "ok", "dbConnected": connected})


# Courses
@app.route("/api/courses")
def list_courses():
    try:
        rows = get_db().execute("SELECT * FROM courses ORDER BY id").fetchall()
    except sqlite3.Error:
        app.logger.exception("Error querying courses")
        return error("Failed to fetch courses", 500)
    return jsonify([row_to_dict(r) for r in rows])


@app.route("/api/courses/<int:course_id>")
def get_course(course_id):
    try:
        row = get_db().execute("SELECT * FROM courses WHERE id = ?", (course_id,)).fetchone()
    except sqlite3.Error:
        app.logger.exception("Error querying course %s", course_id)
        return error("Failed to fetch course", 500)
    if row is None:
        return error("Course not found", 404)
    return jsonify(row_to_dict(row))


@app.route("/api/admin/courses", methods=["POST"])
def create_course():
    data = read_json_body()
    title = data.get("title")
    if not is_text(title):
        return error("Title is required", 400)

    values = (title, data.get("description") or None, data.get("content") or None, data.get("image") or None)
    try:
        db = get_db()
        rows = db.execute("""
            INSERT INTO courses (title, description, content, image)
            VALUES (?, ?, ?, ?)
            RETURNING *
        """, values).fetchall()
        db.commit()
    except sqlite3.Error:
        app.logger.exception("Error inserting course")
        return error("Failed to create course", 500)
    return jsonify(row_to_dict(rows[0])), 201


@app.route("/api/admin/courses/<int:course_id>", methods=["PUT"])
def update_course(course_id):
    data = read_json_body()
    title = data.get("title")
    if not is_text(title):
        return error("Title is required", 400)

    values = (
        title,
        data.get("description") or None,
        data.get("content") or None,
        data.get("image") or None,
        course_id
    )
    try:
        db = get_db()
        rows = db.execute("""
            UPDATE courses
            SET title = ?, description = ?, content = ?, image = ?
            WHERE id = ?
            RETURNING *
        """, values).fetchall()
        db.commit()
    except sqlite3.Error:
        app.logger.exception("Error updating course %s", course_id)
        return error("Failed to update course", 500)
    if not rows:
        return error("Course not found", 404)
    return jsonify(row_to_dict(rows[0]))


# Auth
@app.route("/auth/register", methods=["POST"])
def register():
    data = read_json_body()
    email = data.get("email")
    password = data.get("password")
    if not is_text(email) or not is_text(password):
        return error("Email and password are required", 400)
    name = data.get("name") if isinstance(data.get("name"), str) else None

    try:
        db = get_db()
        rows = db.execute("""
            INSERT INTO users (name, email, password_hash)
            VALUES (?, ?, ?)
            RETURNING id, name, email, created_at
        """, (name, email, hash_password(password))).fetchall()
        db.commit()
    except sqlite3.IntegrityError:
        return error("A user with this email already exists", 409)
    except sqlite3.Error:
        app.logger.exception("Error registering user")
        return error("Failed to register user", 500)
    return jsonify(row_to_dict(rows[0])), 201


@app.route("/auth/login", methods=["POST"])
def login():
    data = read_json_body()
    email = data.get("email")
    password = data.get("password")
    if not is_text(email) or not is_text(password):
        return error("Email and password are required", 400)

    try:
        row = get_db().execute("""
            SELECT id, name, email, created_at
            FROM users
            WHERE email = ? AND password_hash = ?
        """, (email, hash_password(password))).fetchone()
    except sqlite3.Error:
        app.logger.exception("Error logging in")
        return error("Failed to log in", 500)
    if row is None:
        return error("Invalid email or password", 401)

    token = create_session(sessions(), row["id"])
    return jsonify({"token": token, "user": row_to_dict(row)})


# Levels
@app.route("/api/levels")
def list_levels():
    course_id = request.args.get("courseId")
    try:
        course_id = int(course_id) if course_id is not None else None
    except ValueError:
        return error("Invalid course ID", 400)

    try:
        if course_id is None:
            rows = get_db().execute("SELECT * FROM levels ORDER BY id").fetchall()
        else:
            rows = get_db().execute(
                "SELECT * FROM levels WHERE course_id = ? ORDER BY id", (course_id,)
            ).fetchall()
    except sqlite3.Error:
        app.logger.exception("Error querying levels")
        return error("Failed to fetch levels", 500)
    return jsonify([row_to_dict(r) for r in rows])


@app.route("/api/levels/<int:level_id>")
def get_level(level_id):
    try:
        row = get_db().execute("SELECT * FROM levels WHERE id = ?", (level_id,)).fetchone()
    except sqlite3.Error:
        app.logger.exception("Error querying level %s", level_id)
        return error("Failed to fetch level", 500)
    if row is None:
        return error("Level not found", 404)
    return jsonify(row_to_dict(row))


# Submissions
@app.route("/api/submissions")
@token_required
def list_submissions():
    try:
        rows = get_db().execute(
            "SELECT * FROM submissions WHERE user_id = ? ORDER BY id", (g.user_id,)
        ).fetchall()
    except sqlite3.Error:
        app.logger.exception("Error querying submissions")
        return error("Failed to fetch submissions", 500)
    return jsonify([row_to_dict(r) for r in rows])


@app.route("/api/submissions", methods=["POST"])
@token_required
def create_submission():
    data = read_json_body()
    level_id = data.get("levelId")
    content = data.get("content")
    if isinstance(level_id, bool) or not isinstance(level_id, int) or not is_text(content):
        return error("levelId and content are required", 400)

    # inserts nothing when the level does not exist
    try:
        db = get_db()
        rows = db.execute("""
            INSERT INTO submissions (user_id, level_id, content)
            SELECT ?, id, ? FROM levels WHERE id = ?
            RETURNING *
        """, (g.user_id, content, level_id)).fetchall()
        db.commit()
    except sqlite3.Error:
        app.logger.exception("Error inserting submission")
        return error("Failed to create submission", 500)
    if not rows:
        return error("Level not found", 404)
    return jsonify(row_to_dict(rows[0])), 201


# Knowledge base
@app.route("/api/knowledge")
def list_knowledge():
    q = request.args.get("q", "").strip()
    try:
        if q:
            pattern = like_pattern(q)
            rows = get_db().execute("""
                SELECT * FROM knowledge_base
                WHERE title LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\'
                ORDER BY id
            """, (pattern, pattern)).fetchall()
        else:
            rows = get_db().execute("SELECT * FROM knowledge_base ORDER BY id").fetchall()
    except sqlite3.Error:
        app.logger.exception("Error querying knowledge base")
        return error("Failed to fetch knowledge base", 500)
    return jsonify([row_to_dict(r) for r in rows])


@app.route("/api/knowledge/<int:entry_id>")
def get_knowledge(entry_id):
    try:
        row = get_db().execute("SELECT * FROM knowledge_base WHERE id = ?", (entry_id,)).fetchone()
    except sqlite3.Error:
        app.logger.exception("Error querying knowledge entry %s", entry_id)
        return error("Failed to fetch knowledge entry", 500)
    if row is None:
        return error("Knowledge entry not found", 404)
    return jsonify(row_to_dict(row))


# Static files and client-side routing fallback
register_static_routes(app, api_prefixes=("api", "auth"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.logger.info("Server running on port %s", config.PORT)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
