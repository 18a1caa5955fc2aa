"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, constants) lives here; every sub-router
imports what it needs from this package.
"""

import os

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
limiter = Limiter(key_func=get_remote_address)
if IS_TEST_ENV:
    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = no_op_limit

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
INVALID_CREDENTIALS_RESPONSE = HTTPException(
    status_code=401, detail="Email or password is incorrect"
)

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from liprobakin.api.routes.auth import router as auth_router  # noqa: E402
from liprobakin.api.routes.users import router as users_router  # noqa: E402
from liprobakin.api.routes.verifications import router as verifications_router  # noqa: E402
from liprobakin.api.routes.teams import router as teams_router  # noqa: E402
from liprobakin.api.routes.games import router as games_router  # noqa: E402
from liprobakin.api.routes.news import router as news_router  # noqa: E402
from liprobakin.api.routes.admin import router as admin_router  # noqa: E402

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(verifications_router)
router.include_router(teams_router)
router.include_router(games_router)
router.include_router(news_router)
router.include_router(admin_router)
