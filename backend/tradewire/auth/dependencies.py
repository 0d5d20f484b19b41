from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from tradewire.auth.jwt import decode_token
from tradewire.core.exceptions import AuthMissing, AuthInvalid

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdvisorIdentity:
    """Advisor claims taken from a verified session token."""
    id: int
    email: str


def verify_session_token(credentials: Optional[HTTPAuthorizationCredentials]) -> AdvisorIdentity:
    if credentials is None or not credentials.credentials:
        raise AuthMissing("No bearer token provided")

    try:
        payload = decode_token(credentials.credentials)
    except JWTError as e:
        raise AuthInvalid("Token signature or expiry check failed") from e

    if payload.get("type") != "access":
        raise AuthInvalid("Not an access token")
    advisor_id = payload.get("sub")
    email = payload.get("email")
    if not advisor_id or not email:
        raise AuthInvalid("Token is missing identity claims")
    try:
        return AdvisorIdentity(id=int(advisor_id), email=email)
    except ValueError as e:
        raise AuthInvalid("Token subject is not an advisor id") from e


async def get_current_advisor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AdvisorIdentity:
    try:
        return verify_session_token(credentials)
    except AuthMissing:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied: no token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except AuthInvalid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token",
        )
