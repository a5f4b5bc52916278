"""OAuth providers module."""
from .base import OAuthProvider
from .linkedin import LinkedInOAuthProvider

__all__ = ["OAuthProvider", "LinkedInOAuthProvider"]
