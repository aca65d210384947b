"""
Error handling and edge case tests.

This test suite covers how failures surface:
- Exception classes and their HTTP statuses
- Form validation messages
- Storage and database pool failures rendered as error pages
"""

from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import TimeoutError as PoolCheckoutTimeout
from sqlalchemy.orm import Session

from api.dependencies import get_db, parse_id
from app.exceptions import (
    FORM_ERRORS,
    AuthenticationFailedError,
    ConflictError,
    KitchenGuideError,
    NotFoundError,
    PayloadTooLargeError,
    PoolTimeoutError,
    ServiceValidationError,
    StorageUnavailableError,
    UnsupportedMediaTypeError,
)
from domain.schemas import PreparationStepCreate, ProductCreate, parse_form
from repositories import ProductRepository
from test_fixtures import jpeg_upload, product_form


# =============================================================================
# EXCEPTION CLASSES
# =============================================================================


@pytest.mark.parametrize(
    "exc_class,status",
    [
        (ServiceValidationError, 400),
        (AuthenticationFailedError, 401),
        (NotFoundError, 404),
        (ConflictError, 409),
        (PayloadTooLargeError, 413),
        (UnsupportedMediaTypeError, 415),
        (StorageUnavailableError, 500),
        (PoolTimeoutError, 503),
    ],
)
def test_exception_statuses(exc_class, status):
    exc = exc_class()
    assert isinstance(exc, KitchenGuideError)
    assert exc.http_status == status
    assert str(exc) == exc.message == exc_class.default_message


def test_exception_to_dict():
    exc = ConflictError("Duplicate", details={"field": "username"}, code="CONFLICT")
    assert exc.to_dict() == {
        "message": "Duplicate",
        "code": "CONFLICT",
        "details": {"field": "username"},
    }
    assert NotFoundError().to_dict() == {"message": "Not found"}


def test_form_errors_are_client_errors():
    for exc_class in FORM_ERRORS:
        assert 400 <= exc_class.http_status < 500


# =============================================================================
# FORM VALIDATION
# =============================================================================


def test_parse_form_reports_missing_field():
    fields = product_form()
    del fields["description"]

    with pytest.raises(ServiceValidationError) as exc_info:
        parse_form(ProductCreate, **fields)

    assert exc_info.value.message == "Description is required"
    assert "description" in exc_info.value.details


def test_parse_form_strips_pydantic_prefix():
    with pytest.raises(ServiceValidationError) as exc_info:
        parse_form(ProductCreate, **product_form(product_name=""))

    assert exc_info.value.message == "Product name cannot be empty"
    assert exc_info.value.code == "VALIDATION_ERROR"


def test_step_number_accepts_numeric_strings():
    assert parse_form(PreparationStepCreate, step_number=" 4 ", description="Rest").step_number == 4


def test_parse_id_reports_not_found():
    with pytest.raises(NotFoundError) as exc_info:
        parse_id("12345", "Product")
    assert exc_info.value.message == "Product not found"


# =============================================================================
# INFRASTRUCTURE FAILURES
# =============================================================================


class _ExhaustedSession:
    closed = False

    def connection(self):
        raise PoolCheckoutTimeout("QueuePool limit reached")

    def close(self):
        self.closed = True


def test_get_db_turns_pool_timeout_into_service_error():
    session = _ExhaustedSession()
    context = SimpleNamespace(session_factory=lambda: session)

    with pytest.raises(PoolTimeoutError):
        next(get_db(context))
    assert session.closed is True


def test_exhausted_pool_renders_busy_page(client: TestClient):
    client.app.state.context.session_factory = _ExhaustedSession

    r = client.get("/")
    assert r.status_code == 503
    assert "The service is busy" in r.text


def test_storage_failure_renders_generic_error(
    admin_client: TestClient, app_session: Session, tmp_path: Path
):
    """
    Verifies:
    - an unwritable upload location gives a 500 page without internals
    - no product row is created
    """
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    admin_client.app.state.context.storage.upload_dir = blocker

    r = admin_client.post("/product", data=product_form(), files={"picture": jpeg_upload()})

    assert r.status_code == 500
    assert "The image could not be saved" in r.text
    assert "blocked" not in r.text
    assert ProductRepository(app_session).list_all() == []


def test_malformed_form_field_renders_bad_request(client: TestClient):
    # A file where a text field is expected fails request validation
    r = client.post(
        "/login",
        data={"password": "whatever"},
        files={"username": ("name.txt", b"admin", "text/plain")},
    )
    assert r.status_code == 400
    assert "Invalid request" in r.text
