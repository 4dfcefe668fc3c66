from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Callable
import logging

from database.connection import get_db
from services.auth import (
    authenticate_user,
    create_user,
    create_token_for_user,
    verify_token,
    update_last_login,
    get_user_by_id
)
from schemas.user import UserLogin, UserRegister, Token, UserResponse
from models.user import UserRole
from core.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

# Dependency to get current user
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> UserResponse:
    """Resolve the bearer token to an active user."""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Authentication credentials required")

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise AuthenticationError("Could not validate credentials")

    user = get_user_by_id(db, token_data.user_id)
    if user is None:
        logger.warning(f"Token valid but user not found: {token_data.user_id}")
        raise AuthenticationError("User not found")

    if not user.is_active:
        logger.warning(f"Token valid but user inactive: {token_data.email}")
        raise AuthorizationError("Account is inactive")

    return UserResponse.from_orm(user)

def require_roles(*roles: UserRole) -> Callable[..., UserResponse]:
    """Dependency factory allowing only callers holding one of ``roles``."""
    def dependency(current_user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if current_user.role not in roles:
            logger.warning(f"User {current_user.id} with role {current_user.role.value} denied")
            raise AuthorizationError("Access denied. Insufficient permissions.")
        return current_user
    return dependency

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new account and return an access token."""
    logger.info(f"Registration attempt for email: {user_data.email}")

    user = create_user(
        db=db,
        email=user_data.email,
        password=user_data.password,
        name=user_data.name,
        role=user_data.role
    )

    return Token(
        access_token=create_token_for_user(user),
        token_type="bearer",
        user=UserResponse.from_orm(user)
    )

@router.post("/login", response_model=Token)
def login(user_credentials: UserLogin, db: Session = Depends(get_db)):
    """Login user and return access token."""
    logger.info(f"Login attempt for email: {user_credentials.email}")

    user = authenticate_user(db, user_credentials.email, user_credentials.password)
    if not user:
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        logger.warning(f"Login attempt with inactive account: {user_credentials.email}")
        raise AuthorizationError("Account is inactive. Please contact support.")

    update_last_login(db, user)

    logger.info(f"User logged in successfully: {user.email}")
    return Token(
        access_token=create_token_for_user(user),
        token_type="bearer",
        user=UserResponse.from_orm(user)
    )

@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: UserResponse = Depends(get_current_user)):
    """Get current user information."""
    return current_user
