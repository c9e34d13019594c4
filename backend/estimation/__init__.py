from .router import router as estimation_router
from .store import RoomRegistry

__all__ = ["estimation_router", "RoomRegistry"]
