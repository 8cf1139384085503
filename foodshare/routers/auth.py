import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.auth import authenticate_user, create_user_token, get_current_user
from foodshare.config import settings
from foodshare.crud import create_user
from foodshare.database import get_db
from foodshare.models import User
from foodshare.schemas import AuthResponse, TokenRefresh, UserCreate, UserLogin, UserSchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await create_user(db, user_in)
    logger.info(f"Registered user {user.id} ({user.role})")
    return {
        "message": "User registered successfully",
        "token": create_user_token(user),
        "user": user,
    }


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(credentials.email, credentials.password, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"message": "Login successful", "token": create_user_token(user), "user": user}


@router.get("/me", response_model=UserSchema)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/refresh", response_model=TokenRefresh)
async def refresh_token(current_user: User = Depends(get_current_user)):
    return {
        "token": create_user_token(current_user),
        "token_type": "bearer",
        "expires_in": int(settings.ACCESS_TOKEN_EXPIRE.total_seconds()),
    }
