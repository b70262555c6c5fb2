from .config import settings, get_settings
from .security import verify_access_token

__all__ = [
    "settings",
    "get_settings",
    "verify_access_token"
]
