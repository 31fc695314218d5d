import os
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth, credentials

from config import get_settings
from utils.logger import setup_api_logger

logger = setup_api_logger()
bearer_scheme = HTTPBearer(auto_error=False)

# Firebase Admin is initialized once per process
_initialized = False


@dataclass(frozen=True)
class AuthenticatedUser:
    uid: str
    email: Optional[str]
    email_verified: bool = False
    name: Optional[str] = None


def initialize_firebase_admin() -> bool:
    """Initialize the Firebase Admin SDK from FIREBASE_CREDENTIALS_PATH or application default credentials."""
    global _initialized
    if _initialized:
        return True
    try:
        cred_path = get_settings().firebase_credentials_path or os.path.join(
            os.path.dirname(__file__), "..", "serviceAccountKey.json"
        )
        if os.path.exists(cred_path):
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
            logger.info("Firebase Admin initialized with %s", cred_path)
        elif os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
            firebase_admin.initialize_app()
            logger.info("Firebase Admin initialized from GOOGLE_APPLICATION_CREDENTIALS")
        else:
            logger.error("Firebase credentials not found: %s", cred_path)
            return False
        _initialized = True
    except ValueError:
        # default app already exists
        _initialized = True
    return _initialized


def verify_token(id_token: str) -> AuthenticatedUser:
    if not initialize_firebase_admin():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication unavailable")
    try:
        claims = auth.verify_id_token(id_token)
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError,
            auth.CertificateFetchError, ValueError) as e:
        logger.warning("Rejected ID token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")
    return AuthenticatedUser(
        uid=claims["uid"],
        email=claims.get("email"),
        email_verified=bool(claims.get("email_verified")),
        name=claims.get("name"),
    )


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return verify_token(creds.credentials)
