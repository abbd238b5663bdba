"""API v1 module."""

from fastapi import APIRouter, Depends

from catalog.api.v1.healthcheck import router as healthcheck_router
from catalog.api.v1.movies import router as movies_router
from catalog.api.v1.tokens import router as tokens_router
from catalog.api.v1.users import router as users_router
from catalog.core.security.auth import get_identity

# Every route resolves the caller first, so a bad Authorization header is
# rejected even on endpoints that need no login.
router = APIRouter(dependencies=[Depends(get_identity)])

router.include_router(healthcheck_router, tags=["Health"])
router.include_router(movies_router, prefix="/movies", tags=["Movies"])
router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(tokens_router, prefix="/tokens", tags=["Tokens"])
