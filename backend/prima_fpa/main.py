from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from prima_fpa.api.routes import api_router
from prima_fpa.core.config import get_settings
from prima_fpa.core.rate_limit import SlidingWindowLimiter
from prima_fpa.db.base import Base
from prima_fpa.db.session import SessionLocal, engine
from prima_fpa.models.fact import FactLedger


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

settings = get_settings()
logger = logging.getLogger("prima_fpa.api")
limiter = SlidingWindowLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)


def _log_ledger_state() -> None:
    try:
        with SessionLocal() as db:
            fact_count = db.scalar(select(func.count()).select_from(FactLedger))
    except SQLAlchemyError as exc:
        logger.warning("Fact ledger not readable on %s: %s", engine.url.get_backend_name(), exc)
        return
    logger.info("Fact ledger on %s holds %s rows.", engine.url.get_backend_name(), fact_count)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
    _log_ledger_state()
    yield
    engine.dispose()
    logger.info("FP&A engine stopped.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def rate_limit_and_log(request: Request, call_next):
    client = request.client.host if request.client else "unknown"
    if not limiter.allow(client):
        logger.warning("Rate limit hit for %s on %s", client, request.url.path)
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded. Please retry later."},
        )

    started = time.monotonic()
    try:
        response = await call_next(request)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    logger.info(
        "%s %s -> %s %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.monotonic() - started) * 1000,
    )
    return response


@app.get("/healthz")
def healthz() -> dict:
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/", include_in_schema=False)
def root() -> dict[str, str]:
    prefix = settings.api_prefix
    return {
        "service": settings.app_name,
        "facts": f"{prefix}/facts",
        "variance": f"{prefix}/analytics/variance",
        "kpis": f"{prefix}/analytics/kpis",
        "projection": f"{prefix}/analytics/projection",
        "kpi_pack": f"{prefix}/reports/kpi-pack",
        "docs": "/docs",
    }


app.include_router(api_router, prefix=settings.api_prefix)
