"""
Newsletter confirmation and unsubscribe tokens

Tokens are HS256 JWTs signed with the confirmation secret. They carry the
subscriber email, what the token is for, an expiry and a random id. The id of
the outstanding confirmation token is stored on the subscriber record so a
confirmation link works once.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from jose import JWTError, jwt

ALGORITHM = "HS256"
CONFIRM = "confirm"
UNSUBSCRIBE = "unsubscribe"

LIFETIMES = {
    CONFIRM: timedelta(hours=48),
    UNSUBSCRIBE: timedelta(days=365),
}


class IssuedToken(NamedTuple):
    token: str
    token_id: str


class TokenClaims(NamedTuple):
    email: str
    token_id: str


def issue_token(secret: str, email: str, purpose: str, now: Optional[datetime] = None) -> IssuedToken:
    now = now or datetime.now(timezone.utc)
    token_id = secrets.token_urlsafe(16)
    claims = {
        "sub": email.lower(),
        "purpose": purpose,
        "jti": token_id,
        "iat": int(now.timestamp()),
        "exp": int((now + LIFETIMES[purpose]).timestamp()),
    }
    return IssuedToken(jwt.encode(claims, secret, algorithm=ALGORITHM), token_id)


def verify_token(secret: str, token: str, purpose: str) -> Optional[TokenClaims]:
    """Claims of a valid, unexpired token issued for ``purpose``; None otherwise."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    token_id = payload.get("jti")
    if payload.get("purpose") != purpose or not email or not token_id:
        return None
    return TokenClaims(email, token_id)


def generate_confirmation_token(secret: str, email: str) -> IssuedToken:
    return issue_token(secret, email, CONFIRM)


def generate_unsubscribe_token(secret: str, email: str) -> str:
    return issue_token(secret, email, UNSUBSCRIBE).token


def verify_confirmation_token(secret: str, token: str) -> Optional[TokenClaims]:
    return verify_token(secret, token, CONFIRM)


def verify_unsubscribe_token(secret: str, email: str, token: str) -> bool:
    claims = verify_token(secret, token, UNSUBSCRIBE)
    return claims is not None and claims.email == email.lower()
