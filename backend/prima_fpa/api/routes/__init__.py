from fastapi import APIRouter

from prima_fpa.api.routes import analytics, exports, facts, health, reports


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(facts.router)
api_router.include_router(analytics.router)
api_router.include_router(exports.router)
api_router.include_router(reports.router)
