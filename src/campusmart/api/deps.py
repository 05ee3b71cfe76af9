"""API dependencies for authentication and database access."""

from dataclasses import dataclass
from typing import Annotated, Callable
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.core.database import get_db
from campusmart.core.redis import get_redis
from campusmart.core.security import decode_access_token
from campusmart.services.redis_service import RedisService

security = HTTPBearer(auto_error=False)

ROLES = ("admin", "buyer", "seller")


@dataclass(frozen=True)
class Participant:
    """The verified caller: who they are and which role they act in."""

    participant_id: UUID
    role: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_participant(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Participant:
    """Resolve the caller from the bearer token.

    Tokens are issued by the account service and carry ``sub`` (user UUID)
    and ``role``.

    Raises:
        HTTPException: 401 if the token is missing, invalid or malformed
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication token")

    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role not in ROLES:
        raise _unauthorized("Invalid token payload")

    try:
        participant_id = UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid user ID in token")

    return Participant(participant_id=participant_id, role=role)


def require_role(*roles: str) -> Callable:
    """Build a dependency that admits only callers acting in one of ``roles``."""

    async def check_role(
        participant: Annotated[Participant, Depends(get_current_participant)],
    ) -> Participant:
        if participant.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{' or '.join(r.capitalize() for r in roles)} privileges required",
            )
        return participant

    return check_role


async def get_redis_service() -> RedisService:
    """Get RedisService instance with shared Redis connection pool."""
    redis = await get_redis()
    return RedisService(redis)


# Type aliases for cleaner dependency injection
CurrentParticipant = Annotated[Participant, Depends(get_current_participant)]
AdminParticipant = Annotated[Participant, Depends(require_role("admin"))]
BuyerParticipant = Annotated[Participant, Depends(require_role("buyer"))]
SellerParticipant = Annotated[Participant, Depends(require_role("seller"))]
TraderParticipant = Annotated[Participant, Depends(require_role("buyer", "seller"))]
DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisServiceDep = Annotated[RedisService, Depends(get_redis_service)]
