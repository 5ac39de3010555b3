import json
import os

import pytest

import app as file_server
import app_db as db_server
from sessions import InMemorySessionStore


@pytest.fixture
def file_app(tmp_path):
    flask_app = file_server.app
    flask_app.config.update(
        TESTING=True,
        DATA_DIR=str(tmp_path / "data"),
        PUBLIC_DIR=str(tmp_path / "public"),
        DATA_FILES_READY=False,
    )
    return flask_app


@pytest.fixture
def client(file_app):
    return file_app.test_client()


@pytest.fixture
def read_data(file_app):
    def read(name):
        with open(os.path.join(file_app.config["DATA_DIR"], name), encoding="utf-8") as f:
            return json.load(f)
    return read


@pytest.fixture
def register(client):
    def register_user(name="A", email="a@x.com", password="p"):
        resp = client.post("/api/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()
    return register_user


@pytest.fixture
def db_app(tmp_path):
    flask_app = db_server.app
    flask_app.config.update(
        TESTING=True,
        DATABASE_URL=f"sqlite:///{tmp_path / 'learning.db'}",
        PUBLIC_DIR=str(tmp_path / "public"),
        DB_INITIALIZED=False,
        SESSION_STORE=InMemorySessionStore(),
    )
    return flask_app


@pytest.fixture
def db_client(db_app):
    return db_app.test_client()


@pytest.fixture
def auth_headers(db_client):
    db_client.post("/auth/register", json={"name": "Ada", "email": "ada@x.com", "password": "secret"})
    token = db_client.post("/auth/login", json={"email": "ada@x.com", "password": "secret"}).get_json()["token"]
    return {"Authorization": f"Bearer {token}"}
