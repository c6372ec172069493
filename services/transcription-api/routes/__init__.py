from .transcriptions import router as transcriptions_router
from .uploads import router as uploads_router

__all__ = ["transcriptions_router", "uploads_router"]
