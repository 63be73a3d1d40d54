"""Shared API utilities: JSON error helpers and a login rate limiter."""
import time
import logging
from collections import defaultdict

from flask import jsonify, request

logger = logging.getLogger('ledger.api')


def wants_json():
    """True for API paths and AJAX calls, which get JSON instead of pages."""
    return request.path.startswith('/api/') or \
        request.headers.get('X-Requested-With') == 'XMLHttpRequest' or \
        request.accept_mimetypes.best == 'application/json'


# ============== Error Handling ==============

def error_response(message, status_code=400):
    """Standard JSON error body."""
    return jsonify({'success': False, 'error': message}), status_code


def safe_error_response(e, status_code=500):
    """Return error response without leaking DB internals.

    - ValueError/KeyError: returns str(e) as 400 (business validation, safe to expose)
    - Everything else: logs full exception, returns generic message
    """
    if isinstance(e, (ValueError, KeyError)):
        return error_response(str(e), 400)

    logger.exception('Unhandled error in API route')
    return error_response('An internal error occurred', status_code)


# ============== Rate Limiter ==============

class RateLimiter:
    """Simple in-memory rate limiter.

    State is per worker process; good enough for throttling login attempts.
    """

    def __init__(self):
        self._requests = defaultdict(list)

    def is_allowed(self, key, max_requests=10, window_seconds=60):
        """Check if request is allowed.

        Args:
            key: String identifier (user_id, IP address, etc.)
            max_requests: Max requests per window
            window_seconds: Window duration in seconds

        Returns:
            (is_allowed: bool, retry_after: int) tuple
        """
        now = time.time()
        window_start = now - window_seconds

        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        if len(self._requests[key]) >= max_requests:
            oldest = min(self._requests[key])
            retry_after = int(oldest + window_seconds - now) + 1
            return False, max(1, retry_after)

        self._requests[key].append(now)
        return True, 0
