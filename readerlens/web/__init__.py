"""
Web server module for readerlens.

Usage:
    from readerlens.web.server import app

    # uvicorn readerlens.web.server:app --host 0.0.0.0 --port 8000
"""

from readerlens.web.server import app

__all__ = ["app"]
