from conftest import BACKEND_TOKEN, USER_ID, auth_headers, make_record

BASE = f"/v1/store/users/{USER_ID}"


def test_health(backend_client):
    response = backend_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_requires_token_and_user(backend_client):
    assert backend_client.get(f"{BASE}/entries").status_code == 401
    assert backend_client.get(f"{BASE}/entries", headers=auth_headers(token="wrong")).status_code == 401
    assert backend_client.get(f"{BASE}/entries", headers={"X-Backend-Token": BACKEND_TOKEN}).status_code == 401


def test_rejects_paths_outside_the_caller_namespace(backend_client):
    assert backend_client.get("/v1/store/users/bob/entries", headers=auth_headers()).status_code == 403
    assert backend_client.put("/v1/store/other/thing", json={"value": 1}, headers=auth_headers()).status_code == 403


def test_rejects_invalid_keys(backend_client):
    response = backend_client.put(f"{BASE}/bad$key", json={"value": 1}, headers=auth_headers())
    assert response.status_code == 400


def test_allowed_users_gate(backend_client, monkeypatch):
    from backend.settings import reset_settings

    monkeypatch.setenv("ALLOWED_USERS", "carol")
    reset_settings()
    assert backend_client.get(f"{BASE}/entries", headers=auth_headers()).status_code == 403


def test_put_get_delete_round(backend_client):
    headers = auth_headers()
    assert backend_client.get(f"{BASE}/settings", headers=headers).json()["value"] is None
    backend_client.put(f"{BASE}/settings", json={"value": {"theme": "dark"}}, headers=headers)
    assert backend_client.get(f"{BASE}/settings", headers=headers).json()["value"] == {"theme": "dark"}
    assert backend_client.get(f"{BASE}/settings/theme", headers=headers).json()["value"] == "dark"
    backend_client.delete(f"{BASE}/settings", headers=headers)
    assert backend_client.get(f"{BASE}/settings", headers=headers).json()["value"] is None


def test_push_assembles_collection_and_filters(backend_client):
    headers = auth_headers()
    first = backend_client.post(f"{BASE}/entries", json={"value": make_record("2024-03-01")}, headers=headers)
    second = backend_client.post(f"{BASE}/entries", json={"value": make_record("2024-03-02")}, headers=headers)
    assert first.status_code == 200
    first_key = first.json()["key"]
    second_key = second.json()["key"]
    collection = backend_client.get(f"{BASE}/entries", headers=headers).json()["value"]
    assert set(collection) == {first_key, second_key}

    filtered = backend_client.get(
        f"{BASE}/entries",
        params={"order_by": "date", "equal_to": "2024-03-02"},
        headers=headers,
    ).json()["value"]
    assert list(filtered) == [second_key]

    whole_user = backend_client.get(BASE, headers=headers).json()["value"]
    assert set(whole_user["entries"]) == {first_key, second_key}


def test_order_by_requires_equal_to(backend_client):
    response = backend_client.get(f"{BASE}/entries", params={"order_by": "date"}, headers=auth_headers())
    assert response.status_code == 400


def test_push_rejects_null(backend_client):
    response = backend_client.post(f"{BASE}/entries", json={"value": None}, headers=auth_headers())
    assert response.status_code == 400


def test_write_inside_ancestor_value(backend_client):
    headers = auth_headers()
    backend_client.put(f"{BASE}/settings", json={"value": {"theme": "dark", "privacy": "private"}}, headers=headers)
    backend_client.put(f"{BASE}/settings/theme", json={"value": "light"}, headers=headers)
    assert backend_client.get(f"{BASE}/settings", headers=headers).json()["value"] == {
        "theme": "light",
        "privacy": "private",
    }
    backend_client.delete(f"{BASE}/settings/theme", headers=headers)
    backend_client.delete(f"{BASE}/settings/privacy", headers=headers)
    assert backend_client.get(f"{BASE}/settings", headers=headers).json()["value"] is None


def test_ancestor_write_replaces_descendants(backend_client):
    headers = auth_headers()
    backend_client.post(f"{BASE}/entries", json={"value": make_record("2024-03-01")}, headers=headers)
    backend_client.put(f"{BASE}/entries", json={"value": {"only": make_record("2024-03-05")}}, headers=headers)
    assert list(backend_client.get(f"{BASE}/entries", headers=headers).json()["value"]) == ["only"]


def test_revisions_follow_writes(backend_client):
    headers = auth_headers()
    revision_url = f"/v1/store/revision/users/{USER_ID}/entries"
    assert backend_client.get(revision_url, headers=headers).json()["revision"] == 0

    key = backend_client.post(f"{BASE}/entries", json={"value": make_record("2024-03-01")}, headers=headers).json()["key"]
    after_push = backend_client.get(revision_url, headers=headers).json()["revision"]
    assert after_push > 0

    backend_client.put(f"{BASE}/settings", json={"value": {"theme": "dark"}}, headers=headers)
    assert backend_client.get(revision_url, headers=headers).json()["revision"] == after_push

    backend_client.delete(f"{BASE}/entries/{key}", headers=headers)
    after_delete = backend_client.get(revision_url, headers=headers).json()["revision"]
    assert after_delete > after_push

    backend_client.delete(BASE, headers=headers)
    assert backend_client.get(revision_url, headers=headers).json()["revision"] > after_delete


def test_database_url_normalization():
    from backend.db import is_sqlite_url, normalize_database_url

    assert normalize_database_url("sqlite:///./moodlog.db") == "sqlite+aiosqlite:///./moodlog.db"
    assert normalize_database_url("postgres://u:p@db.example.com/moodlog?sslmode=require&channel_binding=require") == (
        "postgresql+asyncpg://u:p@db.example.com/moodlog?ssl=true"
    )
    assert normalize_database_url("postgresql://u@localhost/moodlog") == "postgresql+asyncpg://u@localhost/moodlog"
    assert is_sqlite_url("sqlite+aiosqlite:///x.db")
    assert not is_sqlite_url("postgresql+asyncpg://u@localhost/x")
