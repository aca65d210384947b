"""
End-to-end tests of the HTTP surface through FastAPI's TestClient.

Each test runs the real app (lifespan included) on its own in-memory database.
"""

import re
from pathlib import Path

from sqlalchemy.orm import Session

from app.factory import create_app
from domain.models import Preparation
from fastapi.testclient import TestClient
from repositories import PreparationStepRepository, ProductRepository
from test_fixtures import (
    ADMIN_PASSWORD,
    ADMIN_USERNAME,
    JPEG_BYTES,
    PLACEHOLDER_URL,
    PNG_BYTES,
    build_settings,
    jpeg_upload,
    make_preparation,
    make_product,
    make_user,
    preparation_form,
    product_form,
)

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


# =============================================================================
# HEALTH AND STATIC
# =============================================================================


def test_health_check(client: TestClient):
    r = client.get("/health-check")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["service"] == "Kitchen Hand Guide"
    assert body["database"] == "ok"


def test_responses_carry_request_id(client: TestClient):
    r = client.get("/health-check")
    assert re.fullmatch(UUID_PATTERN, r.headers["X-Request-ID"])
    assert "X-Process-Time" in r.headers


def test_placeholder_picture_is_served(client: TestClient):
    r = client.get(PLACEHOLDER_URL)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("image/svg+xml")
    assert "No picture" in r.text


def test_unknown_route_renders_not_found_page(client: TestClient):
    r = client.get("/does-not-exist")
    assert r.status_code == 404
    assert "Page not found" in r.text


# =============================================================================
# PRODUCTS
# =============================================================================


def test_create_product_end_to_end(admin_client: TestClient, settings):
    """
    Verifies:
    - a valid multipart POST redirects (303) to the new product's page
    - the detail page shows every submitted field and the uploaded picture
    - the picture is served from /static
    """
    r = admin_client.post(
        "/product",
        data=product_form(),
        files={"picture": jpeg_upload()},
        follow_redirects=False,
    )
    assert r.status_code == 303
    location = r.headers["location"]
    assert re.fullmatch(rf"/product/{UUID_PATTERN}", location)

    page = admin_client.get(location)
    assert page.status_code == 200
    for text in ("Fresh Farm Co.", "Organic Tomatoes", "Cold Room A - Shelf 2"):
        assert text in page.text

    stored = list(Path(settings.upload_dir).iterdir())
    assert len(stored) == 1
    picture_url = f"/static/uploads/{stored[0].name}"
    assert picture_url in page.text

    image = admin_client.get(picture_url)
    assert image.status_code == 200
    assert image.content == JPEG_BYTES


def test_create_product_without_picture_uses_placeholder(admin_client: TestClient, app_session: Session):
    r = admin_client.post("/product", data=product_form(), follow_redirects=False)
    assert r.status_code == 303

    (product,) = ProductRepository(app_session).list_all()
    assert product.picture_url == PLACEHOLDER_URL


def test_product_list_newest_first(client: TestClient, app_session: Session):
    make_product(app_session, product_name="Flour")
    make_product(app_session, product_name="Butter")

    r = client.get("/")
    assert r.status_code == 200
    assert r.text.index("Butter") < r.text.index("Flour")


def test_product_form_requires_login(client: TestClient):
    r = client.get("/product/new")
    assert r.status_code == 401
    assert "Login required" in r.text


def test_create_product_requires_login(client: TestClient, app_session: Session):
    r = client.post("/product", data=product_form(), files={"picture": jpeg_upload()})
    assert r.status_code == 401
    assert ProductRepository(app_session).list_all() == []


def test_create_product_missing_field_rerenders_form(admin_client: TestClient, app_session: Session):
    r = admin_client.post("/product", data=product_form(location=""))
    assert r.status_code == 400
    assert "Location cannot be empty" in r.text
    # Submitted values are kept
    assert 'value="Fresh Farm Co."' in r.text
    assert ProductRepository(app_session).list_all() == []


def test_create_product_gif_is_unsupported(admin_client: TestClient, settings, app_session: Session):
    r = admin_client.post(
        "/product",
        data=product_form(),
        files={"picture": ("anim.gif", b"GIF89a....", "image/gif")},
    )
    assert r.status_code == 415
    assert "Only JPG, PNG, and WEBP are allowed" in r.text
    assert list(Path(settings.upload_dir).iterdir()) == []
    assert ProductRepository(app_session).list_all() == []


def test_create_product_oversized_picture(tmp_path):
    settings = build_settings(tmp_path, max_upload_bytes=16)
    with TestClient(create_app(settings)) as client:
        client.post("/login", data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        r = client.post("/product", data=product_form(), files={"picture": jpeg_upload()})

    assert r.status_code == 413
    assert "exceeds maximum allowed size" in r.text


def test_product_detail_not_found(client: TestClient):
    r = client.get("/product/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404
    assert "Product not found" in r.text

    r = client.get("/product/not-a-uuid")
    assert r.status_code == 404


def test_product_detail_escapes_html(client: TestClient, app_session: Session):
    product = make_product(app_session, product_name="<script>alert(1)</script>")

    r = client.get(f"/product/{product.id}")
    assert "<script>alert(1)</script>" not in r.text
    assert "&lt;script&gt;" in r.text


# =============================================================================
# PREPARATIONS AND STEPS
# =============================================================================


def test_create_preparation_with_steps(admin_client: TestClient, app_session: Session):
    data = preparation_form(
        step_description_2="Fold in the berries",
        step_description_1="Whisk eggs and sugar",
        step_description_3="",
        step_description_4="Bake 20 minutes",
    )
    r = admin_client.post(
        "/preparation",
        data=data,
        files={
            "picture": ("muffins.png", PNG_BYTES, "image/png"),
            "step_image_4": ("oven.jpg", JPEG_BYTES, "image/jpeg"),
        },
        follow_redirects=False,
    )
    assert r.status_code == 303

    (prep,) = app_session.query(Preparation).all()
    steps = PreparationStepRepository(app_session).list_by_preparation(prep.id)
    assert [(s.step_number, s.description) for s in steps] == [
        (1, "Whisk eggs and sugar"),
        (2, "Fold in the berries"),
        (3, "Bake 20 minutes"),
    ]
    assert steps[2].picture_url.endswith(".jpg")
    assert prep.picture_url.endswith(".png")

    page = admin_client.get(r.headers["location"])
    assert page.status_code == 200
    assert "Blueberry Muffins" in page.text
    assert page.text.index("Whisk eggs") < page.text.index("Fold in the berries")


def test_create_preparation_invalid_category(admin_client: TestClient):
    r = admin_client.post("/preparation", data=preparation_form(category="veg"))
    assert r.status_code == 400
    assert "Invalid preparation category" in r.text


def test_preparation_list(client: TestClient, app_session: Session):
    make_preparation(app_session, name="Garlic Bread")

    r = client.get("/preparations")
    assert r.status_code == 200
    assert "Garlic Bread" in r.text


def test_add_step_conflict_keeps_first_step(admin_client: TestClient, app_session: Session):
    """
    Verifies:
    - the first step with a number is created (303)
    - a second step with the same number returns 409 on the form
    - the stored step is unchanged
    """
    prep = make_preparation(app_session)
    url = f"/preparation/{prep.id}/step"

    first = admin_client.post(
        url, data={"step_number": "1", "description": "Preheat oven"}, follow_redirects=False
    )
    assert first.status_code == 303

    second = admin_client.post(url, data={"step_number": "1", "description": "Grease tins"})
    assert second.status_code == 409
    assert "already exists" in second.text

    steps_page = admin_client.get(f"/preparation/{prep.id}/steps")
    assert "Preheat oven" in steps_page.text
    assert "Grease tins" not in steps_page.text


def test_add_step_number_too_large_rerenders_form(admin_client: TestClient, app_session: Session):
    prep = make_preparation(app_session)

    r = admin_client.post(
        f"/preparation/{prep.id}/step",
        data={"step_number": str(10**20), "description": "Whisk"},
    )

    assert r.status_code == 400
    assert "Step number is too large" in r.text
    assert PreparationStepRepository(app_session).list_by_preparation(prep.id) == []


def test_create_preparation_gif_step_image_is_unsupported(
    admin_client: TestClient, settings, app_session: Session
):
    r = admin_client.post(
        "/preparation",
        data=preparation_form(step_description_1="Whisk eggs and sugar"),
        files={"step_image_1": ("whisk.gif", b"GIF89a....", "image/gif")},
    )

    assert r.status_code == 415
    assert app_session.query(Preparation).count() == 0
    assert not any(Path(settings.upload_dir).iterdir())


def test_step_detail_and_listing(admin_client: TestClient, app_session: Session):
    prep = make_preparation(app_session)
    admin_client.post(
        f"/preparation/{prep.id}/step",
        data={"step_number": "2", "description": "Pipe the batter"},
        files={"picture": jpeg_upload("batter.jpg")},
    )
    (step,) = PreparationStepRepository(app_session).list_by_preparation(prep.id)

    r = admin_client.get(f"/preparation/{prep.id}/step/{step.id}")
    assert r.status_code == 200
    assert "Pipe the batter" in r.text
    assert step.picture_url in r.text

    other = make_preparation(app_session, name="Scones")
    assert admin_client.get(f"/preparation/{other.id}/step/{step.id}").status_code == 404


def test_step_form_requires_login(client: TestClient, app_session: Session):
    prep = make_preparation(app_session)
    assert client.get(f"/preparation/{prep.id}/step/new").status_code == 401


def test_preparation_not_found(client: TestClient):
    r = client.get("/preparation/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404
    assert "Preparation not found" in r.text


# =============================================================================
# SEARCH
# =============================================================================


def test_search_finds_products_and_preparations(client: TestClient, app_session: Session):
    make_product(app_session, product_name="Blueberries")
    make_preparation(app_session, name="Blueberry Muffins")
    make_product(app_session, product_name="Flour")

    r = client.get("/search", params={"q": "blueberr"})
    assert r.status_code == 200
    assert "Blueberries" in r.text
    assert "Blueberry Muffins" in r.text
    assert "Flour" not in r.text


def test_search_without_query(client: TestClient):
    r = client.get("/search")
    assert r.status_code == 200
    assert "Enter a search term" in r.text


# =============================================================================
# AUTH
# =============================================================================


def test_login_sets_http_only_cookie(client: TestClient):
    r = client.post(
        "/login",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == "/"
    cookie = r.headers["set-cookie"]
    assert cookie.startswith("auth_token=")
    assert "httponly" in cookie.lower()


def test_login_failure_is_generic(client: TestClient, app_session: Session):
    make_user(app_session, username="line_cook", password="right-password")

    wrong = client.post("/login", data={"username": "line_cook", "password": "nope"})
    unknown = client.post("/login", data={"username": "ghost", "password": "nope"})

    assert wrong.status_code == unknown.status_code == 401
    assert "Invalid username or password" in wrong.text
    assert "Invalid username or password" in unknown.text


def test_bearer_token_authenticates(client: TestClient, app_session: Session):
    user = make_user(app_session)
    token = client.app.state.context.auth.issue_token(user)

    r = client.get("/product/new", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert "New product" in r.text


def test_token_for_deactivated_user_rejected(client: TestClient, app_session: Session):
    user = make_user(app_session)
    token = client.app.state.context.auth.issue_token(user)
    user.is_active = False
    app_session.commit()

    r = client.get("/product/new", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_logout_clears_cookie(admin_client: TestClient):
    assert admin_client.get("/product/new").status_code == 200

    r = admin_client.get("/logout", follow_redirects=False)
    assert r.status_code == 303
    assert "max-age=0" in r.headers["set-cookie"].lower()
    admin_client.cookies.clear()

    assert admin_client.get("/product/new").status_code == 401


def test_register_disabled_by_default(client: TestClient):
    assert client.get("/register").status_code == 404
    r = client.post(
        "/register",
        data={
            "username": "new_cook",
            "email": "new@example.com",
            "password": "secret1",
            "confirm_password": "secret1",
        },
    )
    assert r.status_code == 404


def test_register_when_enabled(tmp_path):
    settings = build_settings(tmp_path, registration_enabled=True)
    with TestClient(create_app(settings)) as client:
        form = {
            "username": "new_cook",
            "email": "new@example.com",
            "password": "secret1",
            "confirm_password": "secret1",
        }
        r = client.post("/register", data=form, follow_redirects=False)
        assert r.status_code == 303
        assert "auth_token=" in r.headers["set-cookie"]

        again = client.post("/register", data=form)
        assert again.status_code == 409

        mismatch = client.post(
            "/register", data=dict(form, username="other_cook", confirm_password="secret2")
        )
        assert mismatch.status_code == 400
        assert "Passwords do not match" in mismatch.text
