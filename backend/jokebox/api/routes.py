from fastapi import APIRouter

from jokebox.api.endpoints.health import router as health_router
from jokebox.api.endpoints.jokes import router as jokes_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["meta"])
api_router.include_router(jokes_router, tags=["jokes"])
