"""
Editor authentication

Editors sign in for a bearer token. The token is what lets a request use
preview mode, which shows drafts and scheduled posts.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

from config import Settings
from schemas import AdminUser

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(settings: Settings, data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "scope": "editor"})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=ALGORITHM)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def find_admin(db: Database, settings: Settings, token: Optional[str]) -> Optional[AdminUser]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    if email is None or payload.get("scope") != "editor":
        return None
    user = db["adminuser"].find_one({"email": email})
    if not user or not user.get("is_active", True):
        return None
    return AdminUser(**{k: v for k, v in user.items() if k != "_id"})


def get_current_admin(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AdminUser:
    admin = find_admin(db, settings, token)
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin


def require_preview(
    preview: bool = Query(False),
    token: Optional[str] = Depends(oauth2_scheme),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> bool:
    """Resolve the ``preview`` query flag; only signed-in editors may set it."""
    if not preview:
        return False
    if find_admin(db, settings, token) is None:
        raise HTTPException(
            status_code=401,
            detail="Preview requires an editor token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return True
