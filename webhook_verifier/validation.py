#  Copyright 2024 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Module for validating the signature of the webhook request."""

import base64
import hashlib
import hmac
import logging
from enum import Enum
from typing import NamedTuple

from webhook_verifier.keystore import KeyStore

logger = logging.getLogger(__name__)

HMAC_SCHEME = "HMAC"


class RejectionReason(str, Enum):
    """The reason a webhook request was rejected.

    Attributes:
        MISSING_SENDER_ID: No sender id on the request and no default sender configured.
        MISSING_HEADER: The authorization header is missing.
        WRONG_SCHEME: The authorization header does not use the HMAC scheme.
        UNKNOWN_SIGNING_IDENTITY: No signing key is configured for the sender.
        EMPTY_BODY: The request has no body to verify.
        SIGNATURE_MISMATCH: The signature does not match the body.
        INTERNAL_VERIFICATION_FAILURE: The signature could not be computed.
    """

    MISSING_SENDER_ID = "missing_sender_id"
    MISSING_HEADER = "missing_header"
    WRONG_SCHEME = "wrong_scheme"
    UNKNOWN_SIGNING_IDENTITY = "unknown_signing_identity"
    EMPTY_BODY = "empty_body"
    SIGNATURE_MISMATCH = "signature_mismatch"
    INTERNAL_VERIFICATION_FAILURE = "internal_verification_failure"


class AuthHeader(NamedTuple):
    """The parsed authorization header.

    Attributes:
        scheme: The authentication scheme token, e.g. HMAC.
        parameter: The credentials following the scheme.
    """

    scheme: str
    parameter: str


class VerificationResult(NamedTuple):
    """The outcome of verifying a webhook request.

    Attributes:
        accepted: Whether the request is authentic.
        reason: Why the request was rejected, None if accepted.
        msg: A human readable description of the rejection, empty if accepted.
    """

    accepted: bool
    reason: RejectionReason | None = None
    msg: str = ""


ACCEPTED = VerificationResult(accepted=True)


def _reject(reason: RejectionReason, msg: str) -> VerificationResult:
    """Create a rejection result.

    Args:
        reason: The rejection reason.
        msg: The human readable message.

    Returns:
        The rejected verification result.
    """
    return VerificationResult(accepted=False, reason=reason, msg=msg)


def parse_authorization_header(value: str | None) -> AuthHeader | None:
    """Split an authorization header value into scheme and parameter.

    The scheme keeps its case, so "hmac" and "HMAC" stay distinguishable.

    Args:
        value: The raw header value.

    Returns:
        The parsed header or None if the value is missing or blank.
    """
    if not value or not value.strip():
        return None
    parts = value.strip().split(None, 1)
    parameter = parts[1].strip() if len(parts) > 1 else ""
    return AuthHeader(scheme=parts[0], parameter=parameter)


def compute_signature(body: bytes | str, signing_key: str) -> str:
    """Compute the HMAC-SHA256 signature of a body.

    Args:
        body: The body to sign, str is UTF-8 encoded.
        signing_key: The base64 encoded signing key.

    Returns:
        The base64 encoded digest.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    key_bytes = base64.b64decode(signing_key, validate=True)
    digest = hmac.new(key_bytes, msg=body, digestmod=hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class Verifier:
    """Verify that webhook requests are signed by the key of their sender.

    Attributes:
        key_store: The signing keys of the known senders.
        default_sender_id: The sender assumed when the request names none.
    """

    def __init__(self, key_store: KeyStore, default_sender_id: str | None = None):
        """Initialize the verifier.

        Args:
            key_store: The signing keys of the known senders.
            default_sender_id: The sender assumed when the request names none. When None,
                requests without a sender id are rejected.
        """
        self.key_store = key_store
        self.default_sender_id = default_sender_id

    def validate(
        self,
        auth_header: AuthHeader | None,
        body: bytes | str | None,
        claimed_sender_id: str | None,
    ) -> VerificationResult:
        """Validate a webhook request.

        Args:
            auth_header: The parsed authorization header, None if absent.
            body: The raw request body.
            claimed_sender_id: The sender id given on the request.

        Returns:
            The verification result.
        """
        sender_id = claimed_sender_id or self.default_sender_id
        if not sender_id:
            return _reject(RejectionReason.MISSING_SENDER_ID, "Id not present on request.")

        if auth_header is None:
            return _reject(
                RejectionReason.MISSING_HEADER, "Authentication header not present on request."
            )

        if auth_header.scheme != HMAC_SCHEME:
            return _reject(RejectionReason.WRONG_SCHEME, "Incorrect authorization header scheme.")

        sender_id = sender_id.lower()
        signing_key = self.key_store.get(sender_id)
        if signing_key is None:
            return _reject(
                RejectionReason.UNKNOWN_SIGNING_IDENTITY,
                f"Signing key for {sender_id} is not configured.",
            )

        if not body:
            return _reject(
                RejectionReason.EMPTY_BODY,
                "Unable to validate authentication header for messages with empty body.",
            )

        try:
            expected = compute_signature(body, signing_key)
            is_valid = hmac.compare_digest(
                expected.encode("ascii"), auth_header.parameter.encode("utf-8")
            )
        except (ValueError, TypeError):
            logger.exception("Failed to verify the signature of the request from %s", sender_id)
            return _reject(
                RejectionReason.INTERNAL_VERIFICATION_FAILURE,
                "Failed to verify the signature of the request.",
            )

        if not is_valid:
            logger.debug(
                "Signature mismatch for %s. Expected: '%s' Provided: '%s'",
                sender_id,
                expected,
                auth_header.parameter,
            )
            return _reject(RejectionReason.SIGNATURE_MISMATCH, "Signature validation failed!")

        return ACCEPTED
