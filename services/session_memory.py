from typing import Any, List, Optional
from collections import OrderedDict, deque
from dataclasses import dataclass, asdict
import json
import logging
import redis

@dataclass
class Exchange:
    question: str
    answer: str

class InMemorySessionMemory:
    """Rolling window of recent exchanges per session, kept in process.

    Each session keeps at most `window` exchanges; once `max_sessions` sessions
    exist the least recently used one is evicted.
    """

    def __init__(self, window: int = 10, max_sessions: int = 1000):
        self.window = window
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, deque]" = OrderedDict()

    def recent(self, session_id: str) -> List[Exchange]:
        """Exchanges of a session, newest first"""
        history = self._sessions.get(session_id)
        if history is None:
            return []
        self._sessions.move_to_end(session_id)
        return list(reversed(history))

    def last(self, session_id: str) -> Optional[Exchange]:
        history = self.recent(session_id)
        return history[0] if history else None

    def remember(self, session_id: str, exchange: Exchange) -> None:
        history = self._sessions.get(session_id)
        if history is None:
            history = deque(maxlen=self.window)
            self._sessions[session_id] = history
        history.append(exchange)
        self._sessions.move_to_end(session_id)
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)

class RedisSessionMemory:
    """Same window kept in a Redis list per session, trimmed on every push"""

    def __init__(
        self,
        client: Any,
        window: int = 10,
        ttl_seconds: int = 3600,
        prefix: str = "ia:sesion",
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.client = client
        self.window = window
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    def recent(self, session_id: str) -> List[Exchange]:
        try:
            raw = self.client.lrange(self._key(session_id), 0, self.window - 1)
        except redis.RedisError as e:
            self.logger.warning(f"Could not read session {session_id} from Redis: {str(e)}")
            return []
        return [Exchange(**json.loads(item)) for item in raw]

    def last(self, session_id: str) -> Optional[Exchange]:
        history = self.recent(session_id)
        return history[0] if history else None

    def remember(self, session_id: str, exchange: Exchange) -> None:
        key = self._key(session_id)
        try:
            pipe = self.client.pipeline()
            pipe.lpush(key, json.dumps(asdict(exchange), ensure_ascii=False))
            pipe.ltrim(key, 0, self.window - 1)
            pipe.expire(key, self.ttl_seconds)
            pipe.execute()
        except redis.RedisError as e:
            self.logger.warning(f"Could not store session {session_id} in Redis: {str(e)}")
