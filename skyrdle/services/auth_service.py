"""
Authentication Service

Exchanges an app-password login at the player's repository host for a
signed session token, and verifies those tokens on protected requests.
The token carries the player's DID, which is the identity used by every
game operation.
"""

import datetime
from typing import Any, Dict, Optional

import jwt

from ..models.user import PlayerSession
from .atproto_client import AtprotoClient, AtprotoError, AuthenticationRequired
from ..utils.errors import UpstreamUnavailable

JWT_ALGORITHM = "HS256"


class AuthService:
    """
    Authentication service for session token management.
    """

    def __init__(self, jwt_secret: str, identity_client: Optional[AtprotoClient] = None,
                 expiration_days: int = 7):
        """
        Initialize the authentication service.

        Args:
            jwt_secret: Secret key for JWT token generation
            identity_client: Client used to verify app-password logins
            expiration_days: Token lifetime
        """
        self.jwt_secret = jwt_secret
        self.identity_client = identity_client
        self.expiration_days = expiration_days

    def issue_token(self, did: str, handle: Optional[str] = None) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        payload = {
            "did": did,
            "handle": handle,
            "iat": now,
            "exp": now + datetime.timedelta(days=self.expiration_days)
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=JWT_ALGORITHM)

    def login_with_app_password(self, identifier: str, password: str) -> Dict[str, Any]:
        """
        Authenticate against the repository host and issue a session token.

        Args:
            identifier: Handle or email
            password: App password

        Returns:
            Dictionary with success status and token or error

        Raises:
            UpstreamUnavailable: If the repository host fails for a reason other
                than rejected credentials
        """
        if self.identity_client is None:
            return {"success": False, "error": "Login is not available"}

        try:
            session = self.identity_client.create_session_for(identifier, password)
        except AuthenticationRequired:
            return {"success": False, "error": "Invalid identifier or password"}
        except AtprotoError as e:
            raise UpstreamUnavailable(f"Login failed: {e}")

        did = session.get("did")
        if not did:
            raise UpstreamUnavailable("Login failed: no DID returned")

        handle = session.get("handle")
        return {
            "success": True,
            "token": self.issue_token(did, handle),
            "player": {"did": did, "handle": handle}
        }

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a session token.

        Returns:
            Dictionary with success status and a PlayerSession or error
        """
        if not token:
            return {"success": False, "error": "Token is required"}

        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return {"success": False, "error": "Token has expired"}
        except jwt.InvalidTokenError:
            return {"success": False, "error": "Invalid token"}

        did = payload.get("did")
        if not did:
            return {"success": False, "error": "Invalid token payload"}

        return {"success": True, "player": PlayerSession(did=did, handle=payload.get("handle"))}


# Global service instance
_auth_service: Optional[AuthService] = None


def get_auth_service() -> Optional[AuthService]:
    """Get the global authentication service instance."""
    return _auth_service


def initialize_auth_service(jwt_secret: str, identity_client: Optional[AtprotoClient] = None,
                            expiration_days: int = 7) -> Optional[AuthService]:
    """Initialize the global authentication service instance."""
    global _auth_service
    if not jwt_secret:
        _auth_service = None
        return None
    _auth_service = AuthService(jwt_secret, identity_client, expiration_days)
    return _auth_service
