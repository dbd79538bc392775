import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import AdminSetupRequest, LoginRequest, TokenResponse, UserResponse
from ..security_utils import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(user: User) -> TokenResponse:
    token = create_access_token({"sub": str(user.id), "username": user.username})
    return TokenResponse(accessToken=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange admin credentials for a Bearer token"""
    user = db.query(User).filter(User.username == data.username).first()
    if not user or not verify_password(data.password, user.password_hash):
        logger.warning(f"⚠️ Failed login attempt for username: {data.username}")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    logger.info(f"✅ User {user.id} logged in")
    return _token_response(user)


@router.post("/setup-admin", response_model=TokenResponse, status_code=201)
async def setup_admin(data: AdminSetupRequest, db: Session = Depends(get_db)):
    """Create the first admin account; refused once any user exists"""
    if db.query(User).count() > 0:
        raise HTTPException(status_code=409, detail="An admin account already exists")

    user = User(
        username=data.username.strip(),
        password_hash=hash_password(data.password),
        name=data.name,
        email=str(data.email).lower(),
        role="admin",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"✅ Initial admin account created: {user.username}")
    return _token_response(user)


@router.get("/user", response_model=UserResponse)
async def get_user(current_user: User = Depends(get_current_user)):
    return current_user
