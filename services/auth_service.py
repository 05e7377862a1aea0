"""Bearer credential verification against the identity provider (Firebase Auth)."""
from abc import ABC, abstractmethod
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from config.settings import Settings
from utils.exceptions import UnauthenticatedError
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise UnauthenticatedError("Missing authentication token")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Missing authentication token")
    return token.strip()


class IdentityVerifier(ABC):

    @abstractmethod
    def verify(self, token: str) -> str:
        """Stable user id for ``token``; raises UnauthenticatedError if it is not valid."""


class FirebaseIdentityVerifier(IdentityVerifier):
    """
    Verifies Firebase ID tokens with the Admin SDK.

    The Admin app is initialised on first use from the service-account
    settings, so building the verifier never needs credentials.
    """

    def __init__(self, config: Settings):
        self.config = config
        self._app = None

    def _get_app(self):
        if self._app is not None:
            return self._app

        # Check if already initialized
        try:
            self._app = firebase_admin.get_app()
            return self._app
        except ValueError:
            pass

        if self.config.FIREBASE_ADMIN_PRIVATE_KEY:
            cred = credentials.Certificate(
                {
                    "type": "service_account",
                    "project_id": self.config.FIREBASE_ADMIN_PROJECT_ID,
                    "client_email": self.config.FIREBASE_ADMIN_CLIENT_EMAIL,
                    "private_key": self.config.FIREBASE_ADMIN_PRIVATE_KEY.replace("\\n", "\n"),
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            )
        else:
            # Use Application Default Credentials
            cred = credentials.ApplicationDefault()

        self._app = firebase_admin.initialize_app(
            cred, {"projectId": self.config.FIREBASE_ADMIN_PROJECT_ID}
        )
        logger.info("Firebase Admin SDK initialized")
        return self._app

    def verify(self, token: str) -> str:
        try:
            decoded = firebase_auth.verify_id_token(token, app=self._get_app())
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
                firebase_auth.RevokedIdTokenError, firebase_auth.CertificateFetchError) as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise UnauthenticatedError("Invalid authentication token") from e

        uid = decoded.get("uid")
        if not uid:
            raise UnauthenticatedError("Invalid authentication token")
        return uid
