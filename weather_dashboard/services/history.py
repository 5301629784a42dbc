import logging
import uuid
from datetime import datetime, timezone
from typing import List

import redis
from pydantic import ValidationError

from weather_dashboard.errors import HistoryStoreError, InvalidInput
from weather_dashboard.models import SearchHistoryCreate, SearchHistoryEntry

logger = logging.getLogger(__name__)


class SearchHistoryStore:
    """
    Recent searches kept in a Redis list, newest first:
      key -> [<entry json>, <entry json>, ...]
    """

    def __init__(self, redis_url: str, key: str = "weather:search_history", max_entries: int = 100):
        self.client = redis.from_url(redis_url, decode_responses=True)
        self.key = key
        self.max_entries = max_entries

    def list_recent(self, limit: int = 5, window: int = 10) -> List[SearchHistoryEntry]:
        """Most recent searches, one per city, from the last ``window`` entries."""
        try:
            raw_entries = self.client.lrange(self.key, 0, window - 1)
        except redis.RedisError as exc:
            raise HistoryStoreError(f"Error fetching search history: {exc}") from exc

        seen = set()
        recent: List[SearchHistoryEntry] = []
        for raw in raw_entries:
            try:
                entry = SearchHistoryEntry.model_validate_json(raw)
            except ValidationError:
                logger.warning("Skipping undecodable search history entry")
                continue
            if entry.city_name in seen:
                continue
            seen.add(entry.city_name)
            recent.append(entry)

        logger.info("Fetched search history: %d unique cities", len(recent))
        return recent[:limit]

    def append(self, payload: SearchHistoryCreate) -> SearchHistoryEntry:
        if not payload.city_name or not payload.search_query:
            raise InvalidInput("city_name and search_query are required")

        entry = SearchHistoryEntry(
            id=str(uuid.uuid4()),
            searched_at=datetime.now(timezone.utc),
            **payload.model_dump(),
        )
        try:
            pipe = self.client.pipeline()
            pipe.lpush(self.key, entry.model_dump_json())
            pipe.ltrim(self.key, 0, self.max_entries - 1)
            pipe.execute()
        except redis.RedisError as exc:
            raise HistoryStoreError(f"Error saving search: {exc}") from exc

        logger.info("Saved search: %s", entry.city_name)
        return entry

    def clear(self) -> None:
        try:
            self.client.delete(self.key)
        except redis.RedisError as exc:
            raise HistoryStoreError(f"Error clearing history: {exc}") from exc
        logger.info("Cleared search history")
