"""
Authentication Module

Verifies bearer tokens against Firebase Authentication and exposes the
caller identity and owner checks as FastAPI dependencies.
"""

import logging
import os
from pathlib import Path
from typing import Any

import firebase_admin
import yaml
from fastapi import Depends, Header, Query, Request
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from pydantic import BaseModel

from ..errors import IdentityProviderUnavailable, Unauthenticated
from ..transactions.ownership import ensure_owner

logger = logging.getLogger(__name__)

FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS", "firebase-admin-key.json")
DEV_TOKENS_PATH = os.getenv(
    "DEV_TOKENS_PATH",
    str(Path(__file__).parent.parent.parent / "config" / "dev_tokens.yaml"),
)


class User(BaseModel):
    """Verified caller identity."""

    email: str
    uid: str | None = None
    name: str | None = None


class IdentityVerifier:
    """Turns a bearer token into a verified User."""

    def verify(self, token: str) -> User:
        raise NotImplementedError


class FirebaseVerifier(IdentityVerifier):
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, credentials_path: Path | str = FIREBASE_CREDENTIALS, app_name: str = "finease"):
        """Initialize the Firebase app once for this process.

        Args:
            credentials_path: Path to the service account JSON file
            app_name: Firebase app name
        """
        try:
            self.app = firebase_admin.get_app(app_name)
        except ValueError:
            cred = credentials.Certificate(str(credentials_path))
            self.app = firebase_admin.initialize_app(cred, name=app_name)

    def verify(self, token: str) -> User:
        """Verify an ID token.

        Args:
            token: Firebase ID token

        Returns:
            User built from the token claims

        Raises:
            Unauthenticated: If the token is invalid or has no email claim
            IdentityProviderUnavailable: If signing keys cannot be fetched
        """
        try:
            claims = firebase_auth.verify_id_token(token, app=self.app)
        except firebase_auth.CertificateFetchError as e:
            logger.error(f"Failed to fetch token signing certificates: {e}")
            raise IdentityProviderUnavailable() from e
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError) as e:
            raise Unauthenticated("invalid token") from e

        return _user_from_claims(claims)


class StaticTokenVerifier(IdentityVerifier):
    """Token map loaded from dev_tokens.yaml, for local development and tests."""

    def __init__(self, config_path: Path | str | None = None):
        """Initialize the verifier.

        Args:
            config_path: Path to dev_tokens.yaml
        """
        self.config_path = Path(config_path or DEV_TOKENS_PATH)
        self._load_config()

    def _load_config(self) -> None:
        """Load token map from YAML."""
        self.tokens: dict[str, dict[str, Any]] = {}

        if not self.config_path.exists():
            logger.warning(f"Development token file not found at {self.config_path}")
            return

        with open(self.config_path) as f:
            config = yaml.safe_load(f) or {}

        for entry in config.get("tokens", []):
            self.tokens[str(entry["token"])] = entry

    def verify(self, token: str) -> User:
        claims = self.tokens.get(token)

        if claims is None:
            raise Unauthenticated("invalid token")

        return _user_from_claims(claims)


def _user_from_claims(claims: dict[str, Any]) -> User:
    email = claims.get("email")

    if not email:
        raise Unauthenticated("invalid token")

    return User(
        email=email,
        uid=claims.get("uid") or claims.get("user_id"),
        name=claims.get("name"),
    )


def build_verifier() -> IdentityVerifier:
    """Create the verifier for this process.

    Only an explicit ENVIRONMENT=development falls back to the static token
    map, and only when no service account file is present.
    """
    if os.getenv("ENVIRONMENT") == "development" and not Path(FIREBASE_CREDENTIALS).exists():
        logger.error("Firebase credentials not found, accepting development tokens")
        return StaticTokenVerifier()

    return FirebaseVerifier(FIREBASE_CREDENTIALS)


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    if not authorization or not authorization.strip():
        raise Unauthenticated("token not found")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()

    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("invalid token")

    return token


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """Get the process-wide identity verifier."""
    return request.app.state.verifier


async def get_current_user(
    authorization: str | None = Header(None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> User:
    """Get current authenticated user from the Authorization header.

    Args:
        authorization: Bearer token header
        verifier: Identity verifier

    Returns:
        Authenticated User

    Raises:
        Unauthenticated: If the token is missing or invalid
    """
    token = parse_bearer(authorization)
    return verifier.verify(token)


async def require_owner_email(
    email: str = Query(..., description="Owner email; must match the caller"),
    user: User = Depends(get_current_user),
) -> str:
    """Dependency for owner-scoped queries addressed by email.

    Returns:
        The owner email, equal to the caller's
    """
    ensure_owner(user.email, email)
    return email


async def require_owner_body(
    request: Request,
    user: User = Depends(get_current_user),
) -> User:
    """Dependency for creates: the body email must be the caller's.

    Runs before the body is validated, so a foreign or missing email is
    Forbidden even when the rest of the payload is invalid.

    Returns:
        The authenticated User
    """
    try:
        body = await request.json()
    except ValueError:
        body = None

    email = body.get("email") if isinstance(body, dict) else None
    ensure_owner(user.email, email)
    return user
