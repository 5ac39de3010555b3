from flask import Flask

from web import read_json_body, serve_static

app = Flask(__name__)


def test_read_json_body_ignores_content_type():
    with app.test_request_context("/", method="POST", data='{"a": 1}', content_type="text/plain"):
        assert read_json_body() == {"a": 1}


def test_read_json_body_non_objects_are_empty():
    for raw in ("", "[1, 2]", "null", "{oops"):
        with app.test_request_context("/", method="POST", data=raw):
            assert read_json_body() == {}


def test_traversal_is_forbidden(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (tmp_path / "secret.txt").write_text("nope")

    resp = serve_static(str(public), "../secret.txt")

    assert resp.status_code == 403
    assert resp.get_data() == b"403 Forbidden"
