"""
Core module - Configuration, database, security, email and scheduling.
"""

from consent_portal.core.config import get_settings, settings
from consent_portal.core.database import Base, close_db, get_db, init_db
from consent_portal.core.email import EmailSender, get_email_sender
from consent_portal.core.security import generate_numeric_code, hash_secret, verify_secret

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Email
    "EmailSender",
    "get_email_sender",
    # Security
    "generate_numeric_code",
    "hash_secret",
    "verify_secret",
]
