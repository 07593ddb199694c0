"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter) lives here; every sub-router imports what it
needs from this package.
"""

import os

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
if IS_TEST_ENV:
    limiter = Limiter(key_func=get_remote_address)

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()
else:
    limiter = Limiter(key_func=get_remote_address)

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
INVALID_CREDENTIALS_RESPONSE = HTTPException(status_code=400, detail="Invalid email or password")

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from sport_scheduler.api.routes.auth import router as auth_router  # noqa: E402
from sport_scheduler.api.routes.sports import router as sports_router  # noqa: E402
from sport_scheduler.api.routes.sessions import router as sessions_router  # noqa: E402
from sport_scheduler.api.routes.admin import router as admin_router  # noqa: E402
from sport_scheduler.api.routes.system import router as system_router  # noqa: E402

router = APIRouter()
router.include_router(auth_router)
router.include_router(sports_router)
router.include_router(sessions_router)
router.include_router(admin_router)
router.include_router(system_router)
