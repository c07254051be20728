# Core modules

from .config import settings, get_settings
from .session import CheckoutSessionManager, CheckoutSession, session_manager

__all__ = [
    "settings",
    "get_settings",
    "CheckoutSessionManager",
    "CheckoutSession",
    "session_manager",
]
