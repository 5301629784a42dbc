import json
from unittest.mock import MagicMock

import pytest
import redis

from weather_dashboard.errors import HistoryStoreError, InvalidInput
from weather_dashboard.models import SearchHistoryCreate
from weather_dashboard.services.history import SearchHistoryStore


def entry_json(city, n, query=None):
    return json.dumps({
        "id": f"id-{n}",
        "city_name": city,
        "search_query": query or city.lower(),
        "lat": None,
        "lon": None,
        "searched_at": f"2024-05-01T10:{n:02d}:00+00:00",
    })


@pytest.fixture()
def store():
    s = SearchHistoryStore("redis://localhost:6379/0", key="test:history", max_entries=50)
    s.client = MagicMock()
    return s


def test_list_recent_dedups_keeping_most_recent(store):
    store.client.lrange.return_value = [
        entry_json("London", 9, "london"),
        entry_json("Paris", 8),
        entry_json("London", 7, "London, UK"),
        entry_json("Tokyo", 6),
    ]

    recent = store.list_recent(limit=5, window=10)

    assert [e.city_name for e in recent] == ["London", "Paris", "Tokyo"]
    assert recent[0].search_query == "london"
    store.client.lrange.assert_called_once_with("test:history", 0, 9)


def test_list_recent_caps_count(store):
    store.client.lrange.return_value = [entry_json(f"City{n}", n) for n in range(10)]
    assert len(store.list_recent(limit=5)) == 5


def test_list_recent_skips_bad_entries(store):
    store.client.lrange.return_value = ["not json", entry_json("Oslo", 1)]
    assert [e.city_name for e in store.list_recent()] == ["Oslo"]


def test_append_pushes_and_trims(store):
    pipe = store.client.pipeline.return_value

    entry = store.append(SearchHistoryCreate(city_name="Lisbon", search_query="lisbon", lat=38.7, lon=-9.1))

    assert entry.city_name == "Lisbon"
    assert entry.id
    assert entry.searched_at.tzinfo is not None
    key, payload = pipe.lpush.call_args.args
    assert key == "test:history"
    assert json.loads(payload)["city_name"] == "Lisbon"
    pipe.ltrim.assert_called_once_with("test:history", 0, 49)
    pipe.execute.assert_called_once()


def test_clear_deletes_key(store):
    store.clear()
    store.client.delete.assert_called_once_with("test:history")


def test_redis_failure_is_store_error(store):
    store.client.lrange.side_effect = redis.ConnectionError("Connection refused")
    with pytest.raises(HistoryStoreError) as exc_info:
        store.list_recent()
    assert exc_info.value.status_code == 500


@pytest.mark.parametrize(
    "payload",
    [
        SearchHistoryCreate(city_name="Paris"),
        SearchHistoryCreate(search_query="paris"),
        SearchHistoryCreate(city_name="", search_query="paris"),
    ],
)
def test_append_requires_city_and_query(store, payload):
    with pytest.raises(InvalidInput) as exc_info:
        store.append(payload)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "city_name and search_query are required"
    store.client.pipeline.assert_not_called()
