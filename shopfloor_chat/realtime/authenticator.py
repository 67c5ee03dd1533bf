import logging
from typing import Any, Dict, Optional

import jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from shopfloor_chat.config import AUTH_COOKIE_NAME, JWT_ALGORITHM, JWT_SECRET
from shopfloor_chat.errors import AuthenticationError
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Query parameter carrying the credential in the WebSocket upgrade request
HANDSHAKE_TOKEN_PARAM = "token"
BEARER_PREFIX = "bearer "


class ConnectionAuthenticator:
    """Validates the bearer credential presented when a connection opens.

    The token is looked up in priority order: handshake auth field (query
    parameter), ``Authorization`` header, then the HTTP-only cookie.
    """

    def __init__(
        self,
        secret: str = JWT_SECRET,
        algorithm: str = JWT_ALGORITHM,
        cookie_name: str = AUTH_COOKIE_NAME,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.cookie_name = cookie_name

    def extract_token(self, connection: HTTPConnection) -> Optional[str]:
        token = connection.query_params.get(HANDSHAKE_TOKEN_PARAM)
        if token:
            return token

        authorization = connection.headers.get("authorization")
        if authorization:
            if authorization.lower().startswith(BEARER_PREFIX):
                authorization = authorization[len(BEARER_PREFIX):]
            authorization = authorization.strip()
            if authorization:
                return authorization

        return connection.cookies.get(self.cookie_name) or None

    def decode_user_id(self, token: str) -> int:
        """Verify signature and expiry and return the user id claim."""
        try:
            payload: Dict[str, Any] = jwt.decode(
                token, self.secret, algorithms=[self.algorithm]
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Authentication token expired") from e
        except jwt.PyJWTError as e:
            raise AuthenticationError("Invalid authentication token") from e

        raw_user_id = payload.get("userId", payload.get("sub"))
        try:
            return int(raw_user_id)
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Invalid authentication token") from e

    async def authenticate(self, token: Optional[str], db: AsyncSession) -> UserResponse:
        """Resolve a token to an active user or raise AuthenticationError."""
        if not token:
            raise AuthenticationError("Authentication token required")

        user_id = self.decode_user_id(token)
        try:
            user = await UserRepository(db).get_active_by_id(user_id)
        except (SQLAlchemyError, OSError) as e:
            logger.exception("User lookup failed during authentication")
            raise AuthenticationError("Authentication unavailable") from e

        if user is None:
            raise AuthenticationError("Invalid user or inactive account")
        return user

    async def authenticate_connection(
        self, connection: HTTPConnection, db: AsyncSession
    ) -> UserResponse:
        return await self.authenticate(self.extract_token(connection), db)
