"""Shared slowapi rate limiter for the bridge API.

``RATE_LIMIT`` sets the default limit applied to every route.
"""
import os

from dotenv import load_dotenv
from slowapi import Limiter
from slowapi.util import get_remote_address

load_dotenv(dotenv_path=".env", encoding="utf-8")

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[os.getenv("RATE_LIMIT", "120/minute")],
)
