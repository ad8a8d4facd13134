import uuid

import pytest

from chirpy.database import NotFoundError, Queries, connect
from chirpy.server import ApiConfig, clean_bad_words, create_app


@pytest.fixture
def queries():
    q = Queries(connect(":memory:"))
    q.create_schema()
    return q


@pytest.fixture
def static_dir(tmp_path):
    (tmp_path / "index.html").write_text("<h1>Welcome</h1>")
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "logo.txt").write_text("logo")
    return tmp_path


def _client(queries, static_dir, platform="dev"):
    config = ApiConfig(platform=platform, queries=queries)
    return config, create_app(config, static_dir).test_client()


def _make_user(client, email="user@example.com"):
    password = "password"
    response = client.post("/api/users", json={"email": email, "password": password})
    assert response.status_code == 201
    return response.get_json()


def test_healthz(queries, static_dir):
    _, client = _client(queries, static_dir)
    response = client.get("/api/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"
    assert response.headers["Content-Type"] == "text/plain; charset=utf-8"


def test_static_index_and_metrics(queries, static_dir):
    config, client = _client(queries, static_dir)
    assert client.get("/app/").data == b"<h1>Welcome</h1>"
    assert client.get("/app/assets/logo.txt").data == b"logo"
    assert config.file_server_hits == 2
    page = client.get("/admin/metrics")
    assert page.headers["Content-Type"] == "text/html"
    assert page.get_data(as_text=True) == (
        "<html><body><h1>Welcome, Chirpy Admin</h1>"
        "<p>Chirpy has been visited 2 times!</p></body></html>"
    )


def test_static_missing_file_is_counted(queries, static_dir):
    config, client = _client(queries, static_dir)
    assert client.get("/app/missing.txt").status_code == 404
    assert config.file_server_hits == 1


def test_static_directory_listing(queries, static_dir):
    _, client = _client(queries, static_dir)
    response = client.get("/app/assets/")
    assert response.status_code == 200
    assert 'href="logo.txt"' in response.get_data(as_text=True)


def test_static_path_escape_rejected(queries, static_dir):
    _, client = _client(queries, static_dir)
    assert client.get("/app/../../etc/passwd").status_code in (301, 308, 404)


def test_reset_forbidden_outside_dev(queries, static_dir):
    _, client = _client(queries, static_dir, platform="prod")
    response = client.post("/admin/reset")
    assert response.status_code == 403
    assert response.get_json() == {"error": "Forbidden"}


def test_reset_clears_users_and_hits(queries, static_dir):
    config, client = _client(queries, static_dir)
    _make_user(client)
    client.get("/app/")
    response = client.post("/admin/reset")
    assert response.status_code == 200
    assert response.get_json() == "OK"
    assert config.file_server_hits == 0
    with pytest.raises(NotFoundError):
        queries.get_user_id("user@example.com")


def test_create_user(queries, static_dir):
    _, client = _client(queries, static_dir)
    data = _make_user(client)
    assert data["email"] == "user@example.com"
    assert set(data) == {"id", "created_at", "updated_at", "email"}
    assert uuid.UUID(data["id"]) == queries.get_user_id("user@example.com")


def test_create_user_bad_body(queries, static_dir):
    _, client = _client(queries, static_dir)
    assert client.post("/api/users", data="not json").status_code == 500


def test_login(queries, static_dir):
    _, client = _client(queries, static_dir)
    created = _make_user(client)
    password = "password"
    response = client.post(
        "/api/login", json={"email": "user@example.com", "password": password}
    )
    assert response.status_code == 200
    assert response.get_json()["id"] == created["id"]


def test_login_wrong_password(queries, static_dir):
    _, client = _client(queries, static_dir)
    _make_user(client)
    response = client.post(
        "/api/login", json={"email": "user@example.com", "password": "placeholder"}
    )
    assert response.status_code == 401
    assert response.data == b"Unauthorized"


def test_login_unknown_user(queries, static_dir):
    _, client = _client(queries, static_dir)
    password = "password"
    response = client.post(
        "/api/login", json={"email": "nobody@example.com", "password": password}
    )
    assert response.status_code == 500


def test_create_chirp_cleans_words(queries, static_dir):
    _, client = _client(queries, static_dir)
    user = _make_user(client)
    response = client.post(
        "/api/chirps",
        json={
            "body": "I really need a kerfuffle to go to bed sooner, Fornax !",
            "user_id": user["id"],
        },
    )
    assert response.status_code == 201
    data = response.get_json()
    assert data["body"] == "I really need a **** to go to bed sooner, **** !"
    assert data["user_id"] == user["id"]


def test_create_chirp_too_long(queries, static_dir):
    _, client = _client(queries, static_dir)
    user = _make_user(client)
    response = client.post("/api/chirps", json={"body": "a" * 141, "user_id": user["id"]})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Chirp is too long"}
    assert queries.get_chirps() == []


def test_create_chirp_at_limit(queries, static_dir):
    _, client = _client(queries, static_dir)
    user = _make_user(client)
    response = client.post("/api/chirps", json={"body": "a" * 140, "user_id": user["id"]})
    assert response.status_code == 201


def test_list_and_get_chirps(queries, static_dir):
    _, client = _client(queries, static_dir)
    user = _make_user(client)
    ids = [
        client.post("/api/chirps", json={"body": text, "user_id": user["id"]}).get_json()["id"]
        for text in ("first", "second")
    ]
    listed = client.get("/api/chirps").get_json()
    assert [chirp["id"] for chirp in listed] == ids
    single = client.get(f"/api/chirps/{ids[1]}")
    assert single.status_code == 200
    assert single.get_json()["body"] == "second"


def test_get_chirp_not_found(queries, static_dir):
    _, client = _client(queries, static_dir)
    response = client.get(f"/api/chirps/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.get_json() == {"error": "not found"}


def test_get_chirp_invalid_id(queries, static_dir):
    _, client = _client(queries, static_dir)
    response = client.get("/api/chirps/not-a-uuid")
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_clean_bad_words_leaves_clean_text():
    text = "I had something interesting for breakfast"
    assert clean_bad_words(text) == text


def test_clean_bad_words_is_case_insensitive():
    result = clean_bad_words("FORNAX and Sharbert")
    assert "FORNAX" not in result
    assert "Sharbert" not in result
    assert result.count("****") == 2


def test_clean_bad_words_ignores_punctuated_words():
    text = "Sharbert! is fine"
    assert clean_bad_words(text) == text