"""
Adapters layer - Integrations with third-party primitives (bcrypt).
"""

from .credentials import BcryptCredentialService

__all__ = ["BcryptCredentialService"]
