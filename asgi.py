"""
asgi.py -- Application assembly for Taskboard.

This is the ONLY place Settings are read from the environment. The resulting
immutable value is handed to create_app(); nothing downstream reads env vars.

Run with:  uvicorn asgi:app --reload
"""

from api.main import create_app
from core.config import load_settings

app = create_app(load_settings())
