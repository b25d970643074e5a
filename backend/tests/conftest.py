import os

# Settings are cached on first use; keep the app engine off Postgres under test.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "true")
# Every TestClient request comes from the same host.
os.environ.setdefault("RATE_LIMIT_REQUESTS", "100000")
