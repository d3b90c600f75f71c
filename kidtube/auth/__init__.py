"""Credential persistence, token lifecycle and OAuth login."""

from .credential_store import CredentialStore
from .login import OAuthLogin
from .token_guard import TokenGuard

__all__ = ["CredentialStore", "OAuthLogin", "TokenGuard"]
