from sessionledger.web.routers.me import router as me_router
from sessionledger.web.routers.user import router as user_router

__all__ = [
    "me_router",
    "user_router",
]
