# API Routes

from .acquirer import router as acquirer_router
from .issuer import router as issuer_router

__all__ = ["acquirer_router", "issuer_router"]
