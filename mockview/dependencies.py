from typing import Optional
import json
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from mockview.config import SUPABASE_JWT_SECRET, SUPABASE_JWT_PUBLIC_KEY as _raw_public_key
from mockview.database import get_db
from mockview.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Public key for ES256 verification, either PEM or JWK JSON
SUPABASE_JWT_PUBLIC_KEY = None
if _raw_public_key:
    if _raw_public_key.startswith("-----BEGIN"):
        SUPABASE_JWT_PUBLIC_KEY = _raw_public_key.replace("\\n", "\n")
    elif _raw_public_key.startswith("{"):
        try:
            SUPABASE_JWT_PUBLIC_KEY = json.loads(_raw_public_key)
        except json.JSONDecodeError:
            logger.warning("Could not parse SUPABASE_JWT_PUBLIC_KEY as JWK")


class CurrentUser(BaseModel):
    """The authenticated Supabase user, joined with the local users row."""
    id: str  # UUID as string
    email: str
    full_name: str
    credits: int = 0
    access_token: Optional[str] = None


def decode_access_token(token: str) -> dict:
    """Verify a Supabase access token and return its claims."""
    # Support both ES256 (new) and HS256 (legacy) signing
    if SUPABASE_JWT_PUBLIC_KEY:
        return jwt.decode(
            token,
            SUPABASE_JWT_PUBLIC_KEY,
            algorithms=["ES256"],
            audience="authenticated",
        )
    return jwt.decode(
        token,
        SUPABASE_JWT_SECRET,
        algorithms=["HS256"],
        audience="authenticated",
    )


def ensure_user_row(db: Session, user_id: str, email: Optional[str],
                    full_name: Optional[str] = None) -> User:
    """Return the users row for an auth user, creating it on first sight."""
    user = db.query(User).filter(User.id == user_id).first()
    if user:
        return user

    user = User(
        id=user_id,
        email=email or None,
        full_name=full_name or email or "",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent first request may have created it already
        db.rollback()
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise
        return user
    db.refresh(user)
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Get the current authenticated user from the Supabase JWT."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials

    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    email = payload.get("email", "")
    metadata = payload.get("user_metadata") or {}
    user = ensure_user_row(db, user_id, email, metadata.get("full_name"))

    return CurrentUser(
        id=user.id,
        email=user.email or email,
        full_name=user.full_name,
        credits=user.credits or 0,
        access_token=token,
    )


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[CurrentUser]:
    """Get the current user if authenticated, None otherwise."""
    if not credentials:
        return None

    try:
        return await get_current_user(credentials, db)
    except HTTPException:
        return None
