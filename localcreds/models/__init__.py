"""
Data models for localcreds.
"""

from .core import CipherMode, Credential, parse_credential, serialize_credential

__all__ = ["CipherMode", "Credential", "parse_credential", "serialize_credential"]
