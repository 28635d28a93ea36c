"""Authentication: issue and verify JWT access tokens for app sessions."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from repo_relay.config import settings
from repo_relay.entities import UserEntity
from repo_relay.errors import UnauthorizedError
from repo_relay.protocols import MetadataStore

logger = logging.getLogger(__name__)


class AuthService:
    """Bearer-token plumbing shared by HTTP routes and the chat socket."""

    def __init__(
        self,
        metadata: MetadataStore,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_minutes: int | None = None,
    ) -> None:
        self._metadata = metadata
        self._secret_key = secret_key or settings.secret_key
        self._algorithm = algorithm or settings.jwt_algorithm
        self._expire_minutes = expire_minutes or settings.access_token_expire_minutes

    def create_access_token(
        self,
        subject: str,
        expires_delta: timedelta | None = None,
        extra_claims: dict[str, Any] | None = None,
    ) -> str:
        if expires_delta is None:
            expires_delta = timedelta(minutes=self._expire_minutes)

        expire = datetime.now(timezone.utc) + expires_delta
        payload: dict[str, Any] = {**(extra_claims or {}), "sub": str(subject), "exp": expire}
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode_access_token(self, token: str) -> dict[str, Any]:
        """Verify signature and expiry.

        Raises:
            UnauthorizedError: If the token is invalid or expired
        """
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            logger.info("Rejected access token: %s", e)
            raise UnauthorizedError("Invalid or expired token") from e

    async def authenticate(self, token: str | None) -> UserEntity:
        """Resolve a bearer token to a stored user.

        Raises:
            UnauthorizedError: If the token is missing, invalid, or names no user
        """
        if not token:
            raise UnauthorizedError("Not authenticated")

        payload = self.decode_access_token(token)
        user_id = payload.get("sub")
        if not user_id:
            raise UnauthorizedError("Invalid token")

        user = await self._metadata.get_user(user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return user
