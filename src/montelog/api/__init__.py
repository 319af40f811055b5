"""HTTP API for Monte-Log."""

from montelog.api.app import create_app

__all__ = ["create_app"]
