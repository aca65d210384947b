"""Login, logout and registration routes"""

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
import logging
from typing import Optional

from api import pages
from api.dependencies import get_auth_service, get_db, get_optional_user, get_settings
from app.config import Settings
from app.exceptions import AuthenticationFailedError, FORM_ERRORS, NotFoundError
from domain.schemas import AuthenticatedUser
from services.auth_service import AuthService

router = APIRouter(tags=["Auth"])
logger = logging.getLogger("kitchen.api.auth")


def _signed_in(token: str, settings: Settings) -> RedirectResponse:
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expiration_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.is_production(),
    )
    return response


def _require_registration(settings: Settings):
    if not settings.registration_enabled:
        raise NotFoundError("Registration is currently disabled")


@router.get("/login", response_class=HTMLResponse)
def login_form(user: Optional[AuthenticatedUser] = Depends(get_optional_user)):
    if user is not None:
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    return pages.login_form()


@router.post("/login")
def login(
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Check credentials and set the session cookie"""
    try:
        token = auth.login(db, username, password)
    except AuthenticationFailedError as exc:
        return HTMLResponse(
            pages.login_form(error=exc.message, username=username),
            status_code=exc.http_status,
        )
    return _signed_in(token, settings)


@router.get("/logout")
def logout(settings: Settings = Depends(get_settings)):
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.auth_cookie_name)
    return response


@router.get("/register", response_class=HTMLResponse)
def register_form(settings: Settings = Depends(get_settings)):
    _require_registration(settings)
    return pages.register_form()


@router.post("/register")
def register(
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Create an account and sign it in"""
    _require_registration(settings)
    try:
        user = auth.register(
            db,
            username=username,
            email=email,
            password=password,
            confirm_password=confirm_password,
        )
    except FORM_ERRORS as exc:
        return HTMLResponse(
            pages.register_form(
                error=exc.message, values={"username": username, "email": email}
            ),
            status_code=exc.http_status,
        )
    return _signed_in(auth.issue_token(user), settings)
