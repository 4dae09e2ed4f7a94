"""
asgi.py -- Application assembly for AuthCore.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app

__all__ = ["app"]
