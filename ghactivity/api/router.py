from fastapi import APIRouter

from ghactivity.api.v1 import activity

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(activity.router)
