"""
Authentication routes for signup and login.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.user import UserCreate, UserLogin, Token, UserResponse
from app.core.security import create_access_token
from app.services.user_service import create_user, authenticate

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user."""
    return create_user(user_data.email, user_data.password, db, username=user_data.username)


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = authenticate(credentials.email, credentials.password, db)
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}
