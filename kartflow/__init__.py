"""
KartFlow Console Package.

Browser-based admin console for the KartFlow e-commerce backend. It
includes the FastAPI application, the backend API client and the
configuration.
"""

__version__ = "1.0.0"
__description__ = "Admin console for the KartFlow e-commerce backend"

# Export main components
from .app import app
from .config import settings

__all__ = [
    "app",
    "settings",
    "__version__",
]
