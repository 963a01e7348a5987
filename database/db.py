from sqlalchemy import create_engine               # SQLAlchemy engine factory
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import settings


def _engine_options(url: str) -> dict:
    options = {"echo": settings.SQL_ECHO}
    if url.startswith("sqlite"):
        # one shared in-memory database across threads (TestClient runs handlers in a worker thread)
        options["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


# ✅ engine built from the configured URL
engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# ✅ session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ declarative base for every model
Base = declarative_base()


# ==========================================================
# [Shared] request-scoped DB session
# - one session per request, always closed
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
