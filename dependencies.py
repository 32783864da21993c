from functools import lru_cache
import logging
from config import Settings
from database import engine, SessionLocal
from services.correction_store import CorrectionStore
from services.keyword_assistant import KeywordAssistant
from services.query_assistant import QueryAssistant, KEYWORDS_MODE
from services.query_executor import QueryExecutor
from services.session_memory import InMemorySessionMemory, RedisSessionMemory
from services.sql_generator import SQLGenerator
import redis

logger = logging.getLogger(__name__)

@lru_cache()
def get_settings():
    return Settings()

@lru_cache()
def get_redis_client():
    settings = get_settings()
    try:
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db
        )
        # Test connection
        client.ping()
        return client
    except redis.RedisError as e:
        logger.warning(f"Redis unavailable, session memory stays in process: {str(e)}")
        return None

@lru_cache()
def get_session_memory():
    settings = get_settings()
    redis_client = get_redis_client()
    if redis_client is None:
        return InMemorySessionMemory(
            window=settings.session_window,
            max_sessions=settings.max_sessions
        )
    return RedisSessionMemory(
        redis_client,
        window=settings.session_window,
        ttl_seconds=settings.session_ttl_seconds
    )

@lru_cache()
def get_query_assistant() -> QueryAssistant:
    settings = get_settings()
    store = CorrectionStore(SessionLocal, similarity_threshold=settings.similarity_threshold)
    executor = QueryExecutor(engine)

    if settings.assistant_mode == KEYWORDS_MODE:
        return QueryAssistant(
            store,
            executor,
            keyword_assistant=KeywordAssistant(SessionLocal, get_session_memory()),
            mode=KEYWORDS_MODE
        )

    return QueryAssistant(
        store,
        executor,
        generator=SQLGenerator(
            openai_api_key=settings.openai_api_key,
            model=settings.openai_model
        ),
        mode=settings.assistant_mode
    )
