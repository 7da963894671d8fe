#  Copyright 2026 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Helper functions for the unit tests."""

import base64
import hashlib
import hmac
import secrets


def create_signing_key() -> str:
    """Create a random 256 bit signing key.

    Returns:
        The base64 encoded key.
    """
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


def create_correct_signature(signing_key: str, payload: bytes) -> str:
    """Create a correct webhook signature.

    Args:
        signing_key: The base64 encoded signing key.
        payload: The payload.

    Returns:
        The correct signature.
    """
    hash_object = hmac.new(
        base64.b64decode(signing_key), msg=payload, digestmod=hashlib.sha256
    )
    return base64.b64encode(hash_object.digest()).decode("ascii")


def create_incorrect_signature(signing_key: str, payload: bytes) -> str:
    """Create an incorrect webhook signature.

    Args:
        signing_key: The base64 encoded signing key.
        payload: The payload.

    Returns:
        The incorrect signature.
    """
    signature = create_correct_signature(signing_key, payload)
    replacement = "A" if signature[0] != "A" else "B"
    return replacement + signature[1:]
