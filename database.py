from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker
import re
from config import Settings

# DATABASE_URL from the environment or .env
DATABASE_URL = Settings().database_url

_WORD = re.compile(r"[^\W_]+")


def trigrams(value: str) -> set:
    """Trigram set of a string, following pg_trgm's word padding rules"""
    grams = set()
    for word in _WORD.findall((value or "").lower()):
        padded = f"  {word} "
        grams.update(padded[i:i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left: str, right: str) -> float:
    """Same score as pg_trgm's similarity(): shared trigrams over all trigrams"""
    a, b = trigrams(left), trigrams(right)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def register_similarity(dbapi_connection, connection_record=None):
    """Expose similarity() on SQLite connections so queries match PostgreSQL"""
    dbapi_connection.create_function("similarity", 2, trigram_similarity, deterministic=True)


def build_engine(url: str, **kwargs):
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", register_similarity)
    return engine


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def create_tables(bind=None):
    bind = bind or engine
    if bind.dialect.name == "postgresql":
        with bind.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
    Base.metadata.create_all(bind=bind)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
