import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clinicflow.auth import jwt_handler
from clinicflow.auth.dependencies import get_current_user
from clinicflow.database import get_db
from clinicflow.models.user import User
from clinicflow.services.users import authenticate

router = APIRouter(tags=['auth'])
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    user: UserResponse


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, data.email, data.password)
    if user is None:
        logger.warning('Failed login attempt for %s', data.email.strip().lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Invalid email or password.',
        )

    token = jwt_handler.create_access_token(subject=str(user.id), role=user.role)
    return LoginResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get('/me', response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
