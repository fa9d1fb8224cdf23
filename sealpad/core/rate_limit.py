# sealpad/core/rate_limit.py

from slowapi import Limiter
from slowapi.util import get_remote_address

from sealpad.config import NOTE_WRITE_LIMIT

# Keyed on the client address; ids are public so they make a poor key
limiter = Limiter(key_func=get_remote_address)

# Rate limit constants
WRITE_LIMIT = NOTE_WRITE_LIMIT
