from slowapi import Limiter
from slowapi.util import get_remote_address

# Shared limiter; attached to ``app.state`` in ``app.main``.
limiter = Limiter(key_func=get_remote_address)
