"""
IP-based rate limiting for public endpoints.
"""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address

# Each import can fan out to several fetches and LLM calls
RATE_LIMIT_IMPORT = os.getenv("RATE_LIMIT_IMPORT", "10/minute" if os.getenv("JOBPARSE_ENV") == "dev" else "20/minute")

limiter = Limiter(key_func=get_remote_address)
