"""
API dependencies for dependency injection.

Everything a handler needs comes from the AppContext stored on ``app.state``.
"""

from typing import Generator, List, Optional
from uuid import UUID

from fastapi import Depends, Request
from starlette.datastructures import UploadFile
from sqlalchemy.exc import TimeoutError as PoolCheckoutTimeout
from sqlalchemy.orm import Session

from adapters.storage_adapter import BaseStorageBackend, ImageUpload
from app.config import Settings
from app.context import AppContext
from app.exceptions import AuthenticationFailedError, NotFoundError, PoolTimeoutError
from domain.schemas import AuthenticatedUser
from services.auth_service import AuthService
from services.preparation_service import StepDraft

STEP_DESCRIPTION_PREFIX = "step_description_"
STEP_IMAGE_PREFIX = "step_image_"


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_settings(context: AppContext = Depends(get_context)) -> Settings:
    return context.settings


def get_storage(context: AppContext = Depends(get_context)) -> BaseStorageBackend:
    return context.storage


def get_auth_service(context: AppContext = Depends(get_context)) -> AuthService:
    return context.auth


def get_db(context: AppContext = Depends(get_context)) -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    The connection is checked out up front so an exhausted pool fails the
    request with PoolTimeoutError instead of blocking indefinitely.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    db = context.session_factory()
    try:
        try:
            db.connection()
        except PoolCheckoutTimeout as exc:
            raise PoolTimeoutError() from exc
        yield db
    finally:
        db.close()


def _request_token(request: Request, cookie_name: str) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return request.cookies.get(cookie_name)


def get_optional_user(
    request: Request, context: AppContext = Depends(get_context)
) -> Optional[AuthenticatedUser]:
    """The logged-in user, or None when there is no valid token"""
    token = _request_token(request, context.settings.auth_cookie_name)
    if not token:
        return None
    try:
        claims = context.auth.decode_token(token)
    except AuthenticationFailedError:
        return None
    user = AuthenticatedUser(user_id=claims.sub, username=claims.username)
    # Error pages render the nav bar from here
    request.state.user = user
    return user


def require_user(
    request: Request,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> AuthenticatedUser:
    """A valid token whose account still exists and is active"""
    if user is None:
        raise AuthenticationFailedError("Authentication required")
    try:
        context.auth.get_active_user(db, user.user_id)
    except NotFoundError:
        request.state.user = None
        raise AuthenticationFailedError("Authentication required")
    return user


async def read_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[ImageUpload]:
    """
    Read an optional multipart file field.

    At most ``max_bytes + 1`` bytes are read so an oversized upload is still
    detected by the storage backend without buffering all of it.
    """
    if upload is None or not upload.filename:
        return None
    content = await upload.read(max_bytes + 1)
    return ImageUpload(filename=upload.filename, content=content)


async def get_picture(
    request: Request, context: AppContext = Depends(get_context)
) -> Optional[ImageUpload]:
    """The optional ``picture`` file field of a multipart form"""
    form = await request.form()
    upload = form.get("picture")
    if not isinstance(upload, UploadFile):
        return None
    return await read_upload(upload, context.settings.max_upload_bytes)


async def get_step_drafts(
    request: Request, context: AppContext = Depends(get_context)
) -> List[StepDraft]:
    """
    Collect ``step_description_N`` / ``step_image_N`` fields of a new-preparation form.

    Fields with a non-numeric N are ignored.
    """
    form = await request.form()
    drafts: dict[int, StepDraft] = {}
    for key, value in form.multi_items():
        if key.startswith(STEP_DESCRIPTION_PREFIX):
            suffix = key[len(STEP_DESCRIPTION_PREFIX):]
        elif key.startswith(STEP_IMAGE_PREFIX):
            suffix = key[len(STEP_IMAGE_PREFIX):]
        else:
            continue
        if not suffix.isdigit():
            continue
        draft = drafts.setdefault(int(suffix), StepDraft(int(suffix)))
        if key.startswith(STEP_DESCRIPTION_PREFIX) and isinstance(value, str):
            draft.description = value
        elif isinstance(value, UploadFile):
            upload = await read_upload(value, context.settings.max_upload_bytes)
            if upload is not None and upload.content:
                draft.picture = upload
    return list(drafts.values())


def parse_id(value: str, label: str) -> UUID:
    """Path identifier as a UUID; anything unparseable is reported as not found"""
    try:
        return UUID(value)
    except ValueError:
        raise NotFoundError(f"{label} not found")
