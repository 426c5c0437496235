"""
Auth router: POST /auth/token (OAuth2 password grant).
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from app.services import auth

router = APIRouter(prefix="/auth", tags=["Authentication"])


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="Obtain a JWT access token",
)
def login(form_data: OAuth2PasswordRequestForm = Depends()) -> TokenResponse:
    if not auth.authenticate_user(form_data.username, form_data.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    lifetime = auth.token_lifetime()
    return TokenResponse(
        access_token=auth.create_access_token(subject=form_data.username, expires_delta=lifetime),
        expires_in=int(lifetime.total_seconds()),
    )
