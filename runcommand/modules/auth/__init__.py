"""
Authentication Module - Black Box Interface

Purpose: Validate the shared execute secret
Interface: SecretAuthModule.verify_secret()
Hidden: Comparison strategy
"""

from .auth import SecretAuthModule

__all__ = ["SecretAuthModule"]
