"""Unit tests for RedisHistoryBackend and the activity history it backs, using fakeredis."""

from __future__ import annotations

from unittest.mock import patch

import fakeredis
import pytest
import redis

from cva_enduro.core.exceptions import HistoryMismatchError, HistoryStoreError
from cva_enduro.orchestration.history import ActivityHistory
from cva_enduro.persistence.redis_history import RedisHistoryBackend

PARAMS = '{"batch": {"uuid": "33333333-3333-3333-3333-333333333333"}}'
OTHER_PARAMS = '{"batch": {"uuid": "44444444-4444-4444-4444-444444444444"}}'


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_client(fake_server):
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


@pytest.fixture
def backend(fake_client):
    with patch("redis.Redis", return_value=fake_client):
        return RedisHistoryBackend(host="localhost", port=6379, db=0)


class TestBackendOperations:
    def test_returns_none_on_miss(self, backend):
        assert backend.get("history:wf:1") is None

    def test_put_if_absent_sets_ttl_once(self, backend, fake_client):
        assert backend.put_if_absent("history:wf:1", "first", 60) is True
        assert backend.put_if_absent("history:wf:1", "second", 60) is False
        assert backend.get("history:wf:1") == "first"
        assert 0 < fake_client.ttl("history:wf:1") <= 60

    def test_delete_many(self, backend):
        backend.put_if_absent("history:wf:1", "a", 60)
        backend.put_if_absent("history:wf:2", "b", 60)
        assert backend.delete_many(["history:wf:1", "history:wf:2", "history:wf:3"]) == 2
        assert backend.delete_many([]) == 0

    def test_ping(self, backend):
        assert backend.ping() is True


class TestErrorWrapping:
    @pytest.fixture
    def broken(self, backend):
        down = redis.ConnectionError("connection refused")
        with patch.object(backend._client, "get", side_effect=down), \
                patch.object(backend._client, "set", side_effect=down), \
                patch.object(backend._client, "ping", side_effect=down):
            yield backend

    def test_get_wraps_redis_error(self, broken):
        with pytest.raises(HistoryStoreError, match="history lookup failed"):
            broken.get("history:wf:1")

    def test_put_wraps_redis_error(self, broken):
        with pytest.raises(HistoryStoreError, match="history record failed"):
            broken.put_if_absent("history:wf:1", "v", 1)

    def test_ping_wraps_redis_error(self, broken):
        with pytest.raises(HistoryStoreError, match="localhost:6379/0 unreachable"):
            broken.ping()


class TestActivityHistory:
    def test_records_under_workflow_and_sequence(self, backend, fake_client):
        history = ActivityHistory(backend, ttl=120)
        history.record("wf-1", 1, PARAMS, '{"key": "reports/batch_1.csv"}')

        assert fake_client.exists("history:wf-1:1")
        assert 0 < fake_client.ttl("history:wf-1:1") <= 120
        assert history.get("wf-1", 1, PARAMS) == '{"key": "reports/batch_1.csv"}'
        assert history.get("wf-1", 2, PARAMS) is None
        assert history.get("wf-2", 1, PARAMS) is None

    def test_rejects_entry_recorded_for_other_input(self, backend):
        history = ActivityHistory(backend)
        history.record("wf-1", 1, PARAMS, '{"key": "batch_3333.csv"}')

        with pytest.raises(HistoryMismatchError) as exc_info:
            history.get("wf-1", 1, OTHER_PARAMS)
        assert exc_info.value.seq == 1

    def test_concurrent_record_keeps_first_result(self, backend):
        history = ActivityHistory(backend)
        assert history.record("wf-1", 1, PARAMS, '{"key": "a"}') == '{"key": "a"}'
        assert history.record("wf-1", 1, PARAMS, '{"key": "b"}') == '{"key": "a"}'

    def test_clear_drops_every_call_of_the_run(self, backend, fake_client):
        history = ActivityHistory(backend)
        history.record("wf-1", 1, PARAMS, "{}")
        history.record("wf-1", 2, PARAMS, "{}")
        history.record("wf-2", 1, PARAMS, "{}")

        history.clear("wf-1", [1, 2])

        assert fake_client.keys("history:*") == ["history:wf-2:1"]
