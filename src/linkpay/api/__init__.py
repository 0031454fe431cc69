"""HTTP API."""

from linkpay.api.app import create_app

__all__ = ["create_app"]
