#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Flask application which receives signed webhooks and verifies those."""
import logging

import yaml
from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue

from webhook_verifier.keystore import KeyStore
from webhook_verifier.validation import Verifier, parse_authorization_header

AUTHORIZATION_HEADER = "Authorization"
SENDER_ID_QUERY_PARAM = "id"

app = Flask(__name__.split(".", maxsplit=1)[0])


class ConfigError(Exception):
    """Raised when a configuration error occurs."""


def config_app(flask_app: Flask) -> None:
    """Configure the application.

    Args:
        flask_app: The Flask application to configure.
    """
    flask_app.config.from_prefixed_env()
    key_store = _parse_signing_keys_config(flask_app.config.get("SIGNING_KEYS", ""))
    default_sender_id = _parse_default_sender_id_config(
        flask_app.config.get("DEFAULT_SENDER_ID", ""), key_store=key_store
    )
    flask_app.config["VERIFIER"] = Verifier(
        key_store=key_store, default_sender_id=default_sender_id
    )


def _parse_signing_keys_config(signing_keys_config: str | dict) -> KeyStore:
    """Get the signing keys of the senders.

    Args:
        signing_keys_config: The YAML mapping of sender ids to keys, or the mapping already
            decoded from JSON.

    Returns:
        The key store.

    Raises:
        ConfigError: If the SIGNING_KEYS config is invalid.
    """
    if not signing_keys_config:
        raise ConfigError("SIGNING_KEYS config is not set!")

    if isinstance(signing_keys_config, dict):
        signing_keys = signing_keys_config
    else:
        try:
            signing_keys = yaml.safe_load(signing_keys_config)
        except yaml.YAMLError as exc:
            raise ConfigError("Invalid 'SIGNING_KEYS' config. Invalid yaml.") from exc
    if not isinstance(signing_keys, dict):
        raise ConfigError(
            "Invalid 'SIGNING_KEYS' config. Expected a YAML mapping of sender ids to keys."
        )

    try:
        return KeyStore(keys=signing_keys)
    except ValueError as exc:
        raise ConfigError("Invalid 'SIGNING_KEYS' config. Invalid format.") from exc


def _parse_default_sender_id_config(
    default_sender_id: str | int, key_store: KeyStore
) -> str | None:
    """Get the default sender from the config.

    Args:
        default_sender_id: The default sender config, an int if decoded from JSON.
        key_store: The configured signing keys.

    Returns:
        The default sender id or None if not set.

    Raises:
        ConfigError: If the DEFAULT_SENDER_ID config is invalid.
    """
    if not (sender_id := str(default_sender_id)):
        return None
    if sender_id not in key_store:
        raise ConfigError(
            f"Invalid 'DEFAULT_SENDER_ID' config. No signing key for '{sender_id}'."
        )
    return sender_id.lower()


@app.route("/health", methods=["GET"])
def health_check() -> tuple[str, int]:
    """Health check endpoint.

    Returns:
        A tuple containing an empty string and 200 status code.
    """
    if app.config.get("VERIFIER") is None:
        return "Verifier is not configured.", 503
    return "", 200


@app.route("/webhook", methods=["POST"])
def handle_webhook() -> ResponseReturnValue:
    """Receive a webhook and verify its signature.

    Returns:
        A message acknowledging the webhook and 200 status code on success or
        a failure message and 401 status code.
    """
    verifier: Verifier = app.config["VERIFIER"]
    sender_id = request.args.get(SENDER_ID_QUERY_PARAM)
    result = verifier.validate(
        auth_header=parse_authorization_header(request.headers.get(AUTHORIZATION_HEADER)),
        body=request.get_data(),
        claimed_sender_id=sender_id,
    )
    if not result.accepted:
        app.logger.debug(
            "Rejected webhook from %s (id=%s): %s", request.origin, sender_id, result.reason
        )
        return result.msg, 401

    app.logger.debug("Accepted webhook from %s (id=%s)", request.origin, sender_id)
    return jsonify(type="message", text="Webhook received."), 200


# Exclude from coverage since unit tests should not run as __main__
if __name__ == "__main__":  # pragma: no cover
    # Start development server
    app.logger.setLevel(logging.DEBUG)
    config_app(app)
    app.run()
