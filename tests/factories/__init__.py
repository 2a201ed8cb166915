from .credential_factory import CredentialFactory

__all__ = ["CredentialFactory"]
