import base64
import binascii
import logging
import math
import os
import re
import time

from flask import Flask, jsonify
from flask_cors import CORS

import config
from store import courses_store, next_id, users_store
from web import error, read_json_body, register_error_handlers, register_static_routes

app = Flask(__name__)
app.config.update(config.flask_config())
CORS(app)
register_error_handlers(app)

DATA_URI_RE = re.compile(r"^data:image/([\w.+-]+);base64,(.+)$", re.DOTALL)


# Data files lifecycle
@app.before_request
def ensure_data_files_once():
    if not app.config.get("DATA_FILES_READY"):
        users_store(app.config["DATA_DIR"]).ensure()
        courses_store(app.config["DATA_DIR"]).ensure()
        app.config["DATA_FILES_READY"] = True


# Helpers
def users():
    return users_store(app.config["DATA_DIR"])


def courses():
    return courses_store(app.config["DATA_DIR"])


def public_user(user):
    return {k: v for k, v in user.items() if k != "password"}


def find_by_id(items, item_id):
    for item in items:
        if item["id"] == item_id:
            return item
    return None


def same_email(a, b):
    return isinstance(a, str) and isinstance(b, str) and a.lower() == b.lower()


def is_progress_value(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and 0 <= value <= 100


def text_field(body, key):
    value = body.get(key)
    return value if isinstance(value, str) else None


# Registration / login
@app.route("/api/register", methods=["POST"])
def register():
    body = read_json_body()
    name = text_field(body, "name")
    email = text_field(body, "email")
    password = text_field(body, "password")
    if not name or not email or not password:
        return error("Name, email and password are required.", 400)

    all_users = users().load()
    if any(same_email(u.get("email"), email) for u in all_users):
        return error("A user with this email already exists.", 409)

    # one progress record per course that exists right now
    user = {
        "id": next_id(all_users),
        "name": name,
        "email": email,
        "password": password,
        "courses": [{"id": c["id"], "progress": 0} for c in courses().load()],
        "profilePicture": None
    }
    all_users.append(user)
    users().save(all_users)
    app.logger.info("Registered user %s", user["id"])
    return jsonify(public_user(user))


@app.route("/api/login", methods=["POST"])
def login():
    body = read_json_body()
    email = text_field(body, "email")
    password = text_field(body, "password")
    if not email or not password:
        return error("Email and password are required.", 400)

    for user in users().load():
        if same_email(user.get("email"), email) and user.get("password") == password:
            return jsonify(public_user(user))
    return error("Invalid email or password.", 401)


# Course progress
@app.route("/api/user/<int:user_id>/courses")
def user_courses(user_id):
    user = find_by_id(users().load(), user_id)
    if not user:
        return error("User not found.", 404)
    return jsonify(user["courses"])


@app.route("/api/user/<int:user_id>/course/<int:course_id>/progress", methods=["PUT"])
def update_progress(user_id, course_id):
    progress = read_json_body().get("progress")
    if not is_progress_value(progress):
        return error("Progress must be a number between 0 and 100.", 400)

    all_users = users().load()
    user = find_by_id(all_users, user_id)
    if not user:
        return error("User not found.", 404)
    record = find_by_id(user["courses"], course_id)
    if not record:
        return error("Course not found for this user.", 404)

    record["progress"] = progress
    users().save(all_users)
    return jsonify({"success": True})


# Courses
@app.route("/api/courses")
def list_courses():
    return jsonify(courses().load())


@app.route("/api/courses/<int:course_id>")
def get_course(course_id):
    course = find_by_id(courses().load(), course_id)
    if not course:
        return error("Course not found.", 404)
    return jsonify(course)


# Admin
@app.route("/api/admin/courses", methods=["POST"])
def create_course():
    body = read_json_body()
    title = body.get("title")
    if not title:
        return error("Title is required.", 400)

    all_courses = courses().load()
    course = {
        "id": next_id(all_courses),
        "title": title,
        "description": body.get("description", ""),
        "content": body.get("content", "")
    }
    if body.get("image") is not None:
        course["image"] = body["image"]
    all_courses.append(course)
    courses().save(all_courses)

    # every existing user gets a 0% record for the new course
    all_users = users().load()
    for user in all_users:
        if not find_by_id(user["courses"], course["id"]):
            user["courses"].append({"id": course["id"], "progress": 0})
    users().save(all_users)

    app.logger.info("Created course %s", course["id"])
    return jsonify(course)


@app.route("/api/admin/courses/<int:course_id>", methods=["PUT", "PATCH"])
def update_course(course_id):
    body = read_json_body()
    all_courses = courses().load()
    course = find_by_id(all_courses, course_id)
    if not course:
        return error("Course not found.", 404)

    for field in ("title", "description", "content", "image"):
        if field in body:
            course[field] = body[field]
    courses().save(all_courses)
    return jsonify(course)


@app.route("/api/admin/users")
def list_users():
    return jsonify([public_user(u) for u in users().load()])


# Profile
@app.route("/api/user/<int:user_id>")
def get_profile(user_id):
    user = find_by_id(users().load(), user_id)
    if not user:
        return error("User not found.", 404)
    return jsonify(public_user(user))


@app.route("/api/user/<int:user_id>", methods=["PUT", "PATCH"])
def update_profile(user_id):
    body = read_json_body()
    all_users = users().load()
    user = find_by_id(all_users, user_id)
    if not user:
        return error("User not found.", 404)

    email = text_field(body, "email")
    if email and any(same_email(u.get("email"), email) and u["id"] != user_id for u in all_users):
        return error("Email is already in use by another account.", 409)

    for field in ("name", "email", "password"):
        value = text_field(body, field)
        if value is not None:
            user[field] = value
    users().save(all_users)
    return jsonify(public_user(user))


@app.route("/api/user/<int:user_id>/profile-picture", methods=["POST"])
def upload_profile_picture(user_id):
    image_data = read_json_body().get("imageData")
    match = DATA_URI_RE.match(image_data) if isinstance(image_data, str) else None
    if not match:
        return error("Invalid image data.", 400)
    ext, payload = match.groups()
    # accept unpadded payloads
    payload = "".join(payload.split()).rstrip("=")
    payload += "=" * (-len(payload) % 4)
    try:
        image_bytes = base64.b64decode(payload)
    except (binascii.Error, ValueError):
        return error("Invalid image data.", 400)

    all_users = users().load()
    user = find_by_id(all_users, user_id)
    if not user:
        return error("User not found.", 404)

    uploads_dir = os.path.join(app.config["PUBLIC_DIR"], "uploads")
    os.makedirs(uploads_dir, exist_ok=True)
    file_name = f"user-{user_id}-{int(time.time() * 1000)}.{ext}"
    with open(os.path.join(uploads_dir, file_name), "wb") as f:
        f.write(image_bytes)

    user["profilePicture"] = f"/uploads/{file_name}"
    users().save(all_users)
    return jsonify({"success": True, "url": user["profilePicture"]})


# Static files and client-side routing fallback
register_static_routes(app)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.logger.info("Server listening on port %s", config.PORT)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
