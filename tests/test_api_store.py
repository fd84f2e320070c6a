from datetime import date

import pytest
import requests

from conftest import BACKEND_TOKEN, USER_ID

from dashboard.data.api_client import ApiClient
from dashboard.data.errors import ApiError, InvalidPathError
from dashboard.data.journal import JournalSession
from dashboard.data.models import NewEntry, UserSettings
from dashboard.data.store import ApiStore


@pytest.fixture()
def api_store(backend_client):
    client = ApiClient("http://testserver", BACKEND_TOKEN, USER_ID, session=backend_client)
    return ApiStore(client, start_pollers=False)


def test_client_requires_configuration():
    with pytest.raises(ValueError):
        ApiClient("", BACKEND_TOKEN, USER_ID)
    with pytest.raises(ValueError):
        ApiClient("http://testserver", "", USER_ID)
    with pytest.raises(ValueError):
        ApiClient("http://testserver", BACKEND_TOKEN, "")


def test_store_url_quotes_keys():
    client = ApiClient("http://testserver/", BACKEND_TOKEN, USER_ID, session=object())
    assert client.store_url("/users/alice/entries/") == "/v1/store/users/alice/entries"
    assert client.store_url("users/al ice") == "/v1/store/users/al%20ice"
    assert client.base_url == "http://testserver"


def test_bad_token_raises_api_error(backend_client):
    client = ApiClient("http://testserver", "wrong", USER_ID, session=backend_client)
    with pytest.raises(ApiError) as excinfo:
        ApiStore(client, start_pollers=False).read(f"users/{USER_ID}/entries")
    assert excinfo.value.status_code == 401


def test_read_write_push_delete(api_store):
    path = f"users/{USER_ID}/settings"
    assert api_store.read(path) is None
    api_store.write(path, {"theme": "dark"})
    assert api_store.read(path) == {"theme": "dark"}
    key = api_store.push(f"users/{USER_ID}/entries", {"date": "2024-03-01"})
    assert api_store.read(f"users/{USER_ID}/entries", order_by="date", equal_to="2024-03-01") == {
        key: {"date": "2024-03-01"}
    }
    api_store.delete(path)
    assert api_store.read(path) is None


def test_invalid_paths_fail_before_the_request(api_store):
    with pytest.raises(InvalidPathError):
        api_store.read("users/alice/bad.key")


def test_poller_delivers_only_on_revision_change(api_store):
    seen = []
    path = f"users/{USER_ID}/entries"
    subscription = api_store.subscribe(path, seen.append)
    poller = api_store.poller_for(subscription)

    assert poller.poll_once() is True
    assert seen == [None]
    assert poller.poll_once() is False

    key = api_store.push(path, {"date": "2024-03-01"})
    assert poller.poll_once() is True
    assert seen[-1] == {key: {"date": "2024-03-01"}}

    subscription.cancel()
    assert api_store.poller_for(subscription) is None
    api_store.push(path, {"date": "2024-03-02"})
    assert poller.poll_once() is False
    assert len(seen) == 2


def test_journal_session_over_backend(api_store):
    session = JournalSession(USER_ID, api_store)
    key = session.add(NewEntry(title="Run", content="5k", mood="excited", date=date(2024, 3, 15)))
    session.add(NewEntry(title="Rest", content="Couch", mood="calm", date=date(2024, 3, 16)))
    assert key

    by_day = session.fetch_by_date(date(2024, 3, 15))
    assert [entry.id for entry in by_day] == [key]
    assert {entry.title for entry in session.fetch_all()} == {"Run", "Rest"}

    assert session.update(by_day[0].with_changes(mood="happy"))
    assert session.fetch_by_date(date(2024, 3, 15))[0].mood == "happy"

    assert session.get_settings() == UserSettings()
    assert session.delete(key)
    assert [entry.title for entry in session.fetch_all()] == ["Rest"]
    session.close()


def test_journal_session_reports_backend_errors(backend_client):
    client = ApiClient("http://testserver", "wrong", USER_ID, session=backend_client)
    session = JournalSession(USER_ID, ApiStore(client, start_pollers=False))
    result = session.load_entries()
    assert not result.ok
    assert session.add(NewEntry(title="t", content="c", mood="sad", date=date(2024, 3, 1))) is None


class _FakeResponse:
    def __init__(self, status_code, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)
        return self._body


class _FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        return self.response


def _fake_store(response):
    client = ApiClient("http://testserver", BACKEND_TOKEN, USER_ID, session=_FakeSession(response))
    return ApiStore(client, start_pollers=False)


def test_non_json_success_body_is_an_api_error():
    store = _fake_store(_FakeResponse(200, text="<html>proxy</html>"))
    with pytest.raises(ApiError) as excinfo:
        store.read(f"users/{USER_ID}/entries")
    assert excinfo.value.status_code == 200


def test_non_object_json_body_is_an_api_error():
    store = _fake_store(_FakeResponse(200, body=["not", "a", "node"]))
    with pytest.raises(ApiError):
        store.read(f"users/{USER_ID}/entries")


def test_error_status_with_html_body_keeps_text_detail():
    store = _fake_store(_FakeResponse(502, text="Bad gateway"))
    with pytest.raises(ApiError) as excinfo:
        store.delete(f"users/{USER_ID}/entries/k1")
    assert excinfo.value.status_code == 502
    assert excinfo.value.detail == "Bad gateway"


def test_session_degrades_on_malformed_backend_replies():
    for response in (_FakeResponse(200, text="<html></html>"), _FakeResponse(200, body=[1, 2])):
        session = JournalSession(USER_ID, _fake_store(response))
        result = session.load_entries()
        assert not result.ok
        assert session.fetch_all() == []
        assert session.fetch_by_date("2024-03-01") == []
        assert session.delete("k1") is False
        assert session.get_settings() == UserSettings()
        session.close()
