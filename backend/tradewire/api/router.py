from fastapi import APIRouter
from tradewire.api import (
    advisor_routes,
    client_routes,
    trade_routes,
)

api_router = APIRouter()
api_router.include_router(advisor_routes.router)
api_router.include_router(client_routes.router)
api_router.include_router(trade_routes.router)
