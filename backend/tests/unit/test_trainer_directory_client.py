"""Tests for the trainer directory HTTP client."""

from __future__ import annotations

import httpx
import pytest

from trainer_assignment.core.exceptions import TrainerDirectoryError
from trainer_assignment.domain.value_objects import Coordinates
from trainer_assignment.integrations.trainer_directory_client import TrainerDirectoryClient

TRAINER_JSON = {
    "id": "t-1",
    "isActive": True,
    "franchiseId": None,
    "zoneId": "zone-1",
    "certifiedCourses": ["course-1", "course-2"],
    "location": {"latitude": 12.97, "longitude": 77.59},
}


def _client(handler, **overrides):
    sleeps = []
    options = {
        "base_url": "http://directory.test",
        "max_retries": 3,
        "backoff_seconds": 0.1,
        "transport": httpx.MockTransport(handler),
        "sleep": sleeps.append,
    }
    options.update(overrides)
    return TrainerDirectoryClient(**options), sleeps


def _fetch(client, **overrides):
    kwargs = {"franchise_id": None, "zone_id": "zone-1", "course_id": "course-1", "is_active": True}
    kwargs.update(overrides)
    return client.fetch_trainers(**kwargs)


class TestFetchTrainers:
    def test_parses_records(self):
        client, _ = _client(lambda request: httpx.Response(200, json={"data": [TRAINER_JSON]}))
        [trainer] = _fetch(client)
        assert trainer.id == "t-1"
        assert trainer.franchise_id is None
        assert trainer.zone_id == "zone-1"
        assert trainer.certified_course_ids == frozenset({"course-1", "course-2"})
        assert trainer.location == Coordinates(12.97, 77.59)

    def test_company_scope_query(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        client, _ = _client(handler)
        assert _fetch(client) == []
        params = seen[0].url.params
        assert seen[0].url.path == "/api/v1/trainers"
        assert params["operator"] == "company"
        assert "franchiseId" not in params
        assert params["zoneId"] == "zone-1"
        assert params["courseId"] == "course-1"
        assert params["isActive"] == "true"

    def test_franchise_scope_query(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        client, _ = _client(handler)
        _fetch(client, franchise_id="f-1")
        assert seen[0].url.params["franchiseId"] == "f-1"
        assert "operator" not in seen[0].url.params

    def test_bare_list_payload_accepted(self):
        client, _ = _client(lambda request: httpx.Response(200, json=[TRAINER_JSON]))
        assert [t.id for t in _fetch(client)] == ["t-1"]

    def test_missing_location_is_none(self):
        record = {k: v for k, v in TRAINER_JSON.items() if k != "location"}
        client, _ = _client(lambda request: httpx.Response(200, json={"data": [record]}))
        assert _fetch(client)[0].location is None

    def test_api_key_sent_as_bearer(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        client, _ = _client(handler, api_key="secret")
        _fetch(client)
        assert seen[0].headers["Authorization"] == "Bearer secret"


class TestRetries:
    def test_retries_server_errors_then_succeeds(self):
        responses = iter(
            [
                httpx.Response(503),
                httpx.Response(502),
                httpx.Response(200, json={"data": [TRAINER_JSON]}),
            ]
        )
        client, sleeps = _client(lambda request: next(responses))
        assert len(_fetch(client)) == 1
        assert sleeps == pytest.approx([0.1, 0.2])

    def test_exhausted_retries_raise(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        client, sleeps = _client(handler)
        with pytest.raises(TrainerDirectoryError) as exc_info:
            _fetch(client)
        assert len(calls) == 3
        assert sleeps == pytest.approx([0.1, 0.2])
        assert "after 3 attempts" in exc_info.value.message

    def test_client_errors_are_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"error": "bad filter"})

        client, sleeps = _client(handler)
        with pytest.raises(TrainerDirectoryError) as exc_info:
            _fetch(client)
        assert exc_info.value.status_code == 400
        assert len(calls) == 1
        assert sleeps == []

    def test_malformed_json(self):
        client, _ = _client(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(TrainerDirectoryError, match="malformed JSON"):
            _fetch(client)

    def test_invalid_record(self):
        client, _ = _client(lambda request: httpx.Response(200, json={"data": [{"isActive": True}]}))
        with pytest.raises(TrainerDirectoryError, match="invalid trainer record"):
            _fetch(client)

    def test_payload_without_list(self):
        client, _ = _client(lambda request: httpx.Response(200, json={"data": {"id": "x"}}))
        with pytest.raises(TrainerDirectoryError):
            _fetch(client)

    def test_zero_retries_rejected(self):
        with pytest.raises(ValueError):
            TrainerDirectoryClient(base_url="http://x", max_retries=0)

    def test_client_is_callable(self):
        client, _ = _client(lambda request: httpx.Response(200, json={"data": [TRAINER_JSON]}))
        assert [t.id for t in client(franchise_id=None, zone_id=None, course_id="course-1")] == ["t-1"]
