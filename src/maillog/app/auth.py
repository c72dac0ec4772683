"""Single-use authorization tokens for operator actions.

Tokens are short-lived HS256 JWTs bound to an action and an operator
session. Each token carries a ``jti``; redeeming it records the id in a
ledger so it cannot be redeemed again before it expires.
"""

import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt
from loguru import logger

from ..core.exceptions import AuthorizationError, ConfigurationError
from ..core.types import MIGRATION_ACTION, AuthorizedRequest

if TYPE_CHECKING:
    from .protocols import TokenLedger

ALGORITHM = "HS256"


class InMemoryTokenLedger:
    """Used token ids for a single process, forgotten once expired."""

    def __init__(self):
        self._used: dict[str, float] = {}

    def consume(self, jti: str, expires_at: float) -> bool:
        """Record a token id.

        Returns:
            True the first time an unexpired id is seen, False after that.
        """
        now = time.time()
        self._used = {k: exp for k, exp in self._used.items() if exp > now}
        if jti in self._used:
            return False
        self._used[jti] = expires_at
        return True

    def __len__(self) -> int:
        return len(self._used)


class NonceGate:
    """Issues and redeems single-use JWTs for operator actions."""

    def __init__(
        self,
        secret: str,
        ttl: int = 24 * 60 * 60,
        ledger: "TokenLedger | None" = None,
    ):
        """Initialize the gate.

        Args:
            secret: Signing key shared by every request of the site.
            ttl: Token lifetime in seconds.
            ledger: Where redeemed token ids are kept; in-memory if omitted.

        Raises:
            ConfigurationError: If no secret is configured.
        """
        if not secret:
            raise ConfigurationError(
                "Nonce secret not configured. Set MAILLOG_NONCE_SECRET "
                "so tokens survive between requests."
            )
        self._secret = secret
        self.ttl = ttl
        self.ledger = ledger if ledger is not None else InMemoryTokenLedger()

    def issue(self, session_id: str, action: str = MIGRATION_ACTION) -> str:
        """Create a token for ``action`` in ``session_id``."""
        now = datetime.now(timezone.utc)
        payload = {
            "action": action,
            "sid": session_id,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(
        self, token: str | None, session_id: str, action: str = MIGRATION_ACTION
    ) -> dict[str, Any] | None:
        """Decode a token without redeeming it.

        Returns:
            The token claims, or None if the token is missing, malformed,
            expired, or bound to another session or action.
        """
        if not token:
            return None

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat", "jti"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning(f"Rejected expired token for {action}")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected invalid token for {action}: {e}")
            return None

        if claims.get("action") != action or claims.get("sid") != session_id:
            logger.warning(f"Rejected token bound to another session or action for {action}")
            return None
        return claims

    def authorize(
        self, token: str | None, session_id: str, action: str = MIGRATION_ACTION
    ) -> AuthorizedRequest | None:
        """Redeem a token.

        Returns:
            An AuthorizedRequest, or None if the token is missing, invalid,
            expired or already used.
        """
        claims = self.verify(token, session_id, action)
        if claims is None:
            return None

        if not self.ledger.consume(claims["jti"], float(claims["exp"])):
            logger.warning(f"Rejected reused token for {action}")
            return None

        return AuthorizedRequest(action=action, session_id=session_id, token=token)

    def require(
        self, token: str | None, session_id: str, action: str = MIGRATION_ACTION
    ) -> AuthorizedRequest:
        """Redeem a token or raise.

        Raises:
            AuthorizationError: If the token cannot be redeemed.
        """
        request = self.authorize(token, session_id, action)
        if request is None:
            raise AuthorizationError(f"Not authorized to perform {action}")
        return request
