"""
Core data models for localcreds.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import MalformedCredentialError


class CipherMode(str, Enum):
    CBC = "aes-256-cbc"
    GCM = "aes-256-gcm"


class Credential(BaseModel):
    """Identity token record persisted by a storage strategy."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Identifier of the credential owner")
    token: str = Field(description="Secret token string")


def serialize_credential(credential: Credential) -> str:
    """Render a credential as canonical compact JSON."""
    return credential.model_dump_json()


def parse_credential(text: str) -> Credential:
    """
    Parse canonical JSON back into a credential.

    Args:
        text: Serialized credential

    Returns:
        Parsed credential

    Raises:
        MalformedCredentialError: If the text is not a valid credential record
    """
    try:
        return Credential.model_validate_json(text)
    except ValidationError as e:
        raise MalformedCredentialError(
            f"Stored credential is not a valid record: {e.error_count()} error(s)",
            metadata={"errors": [err["type"] for err in e.errors()]},
        ) from e
