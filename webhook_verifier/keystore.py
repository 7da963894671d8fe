#  Copyright 2024 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Module holding the signing keys of the known webhook senders."""

import base64
import binascii
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, field_validator

SIGNING_KEY_LENGTH = 32
Identity = str
SigningKey = str


class KeyStore(BaseModel):
    """The signing keys of the webhook senders.

    Attributes:
        keys: The mapping of lowercase sender identities to base64 encoded 256 bit keys.
    """

    model_config = ConfigDict(frozen=True)

    keys: Mapping[Identity, SigningKey]

    @field_validator("keys")
    @classmethod
    def _check_keys(cls, keys: Mapping[Identity, SigningKey]) -> Mapping[Identity, SigningKey]:
        """Normalize the identities and check the key material.

        Args:
            keys: The mapping to check.

        Raises:
            ValueError: If an identity is empty or duplicated, or a key is not 256 bit base64.

        Returns:
            The read-only mapping with lowercase identities.
        """
        normalized = {}
        for identity, signing_key in keys.items():
            lowered = identity.strip().lower()
            if not lowered:
                raise ValueError("Empty sender identity.")
            if lowered in normalized:
                raise ValueError(f"Duplicate sender identity '{lowered}'.")
            try:
                key_bytes = base64.b64decode(signing_key, validate=True)
            except binascii.Error as exc:
                raise ValueError(f"Signing key for {lowered} is not valid base64.") from exc
            if len(key_bytes) != SIGNING_KEY_LENGTH:
                raise ValueError(
                    f"Signing key for {lowered} must be {SIGNING_KEY_LENGTH * 8} bits, "
                    f"got {len(key_bytes) * 8}."
                )
            normalized[lowered] = signing_key
        return MappingProxyType(normalized)

    def get(self, identity: Identity) -> SigningKey | None:
        """Look up the signing key of a sender.

        Args:
            identity: The sender identity, matched case-insensitively.

        Returns:
            The base64 encoded key or None if the sender is not configured.
        """
        return self.keys.get(identity.lower())

    def __contains__(self, identity: object) -> bool:
        """Check whether a sender has a signing key.

        Args:
            identity: The sender identity.

        Returns:
            True if a key is configured for the sender.
        """
        return isinstance(identity, str) and identity.lower() in self.keys
