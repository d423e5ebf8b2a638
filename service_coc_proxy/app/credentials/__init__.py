"""
API key handling for the upstream client.
"""

from .rotator import CredentialRotator

__all__ = ["CredentialRotator"]
