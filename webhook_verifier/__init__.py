#  Copyright 2024 Canonical Ltd.
#  See LICENSE file for licensing details.
"""Package for verifying signed inbound webhooks."""
