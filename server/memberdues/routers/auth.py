from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from memberdues.auth.deps import get_current_user
from memberdues.auth.security import create_access_token
from memberdues.core.db import get_db
from memberdues.models.user import User
from memberdues.schemas.auth import LoginRequest, TokenResponse, UserOut
from memberdues.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = auth_service.authenticate_user(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token(subject=str(user.id), role=user.role)
    return TokenResponse(access_token=token, role=user.role)


@router.get("/whoami", response_model=UserOut)
def whoami(user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.from_orm(user)
