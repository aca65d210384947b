"""Product catalog routes"""

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
import logging
from typing import Optional

from adapters.storage_adapter import BaseStorageBackend, ImageUpload
from api import pages
from api.dependencies import (
    get_db,
    get_optional_user,
    get_picture,
    get_settings,
    get_storage,
    parse_id,
    require_user,
)
from app.config import Settings
from app.exceptions import FORM_ERRORS
from domain.schemas import AuthenticatedUser
from services.product_service import ProductService

router = APIRouter(tags=["Products"])
logger = logging.getLogger("kitchen.api.products")


@router.get("/", response_class=HTMLResponse)
def list_products(
    db: Session = Depends(get_db),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    """Home page: every product, newest first"""
    return pages.product_list(ProductService.list_products(db), user)


@router.get("/product/new", response_class=HTMLResponse)
def new_product_form(user: AuthenticatedUser = Depends(require_user)):
    return pages.product_form(user)


@router.post("/product")
def create_product(
    supplier_name: str = Form(""),
    product_name: str = Form(""),
    location: str = Form(""),
    description: str = Form(""),
    picture: Optional[ImageUpload] = Depends(get_picture),
    user: AuthenticatedUser = Depends(require_user),
    db: Session = Depends(get_db),
    storage: BaseStorageBackend = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Create a product from the multipart form, then show it"""
    form = {
        "supplier_name": supplier_name,
        "product_name": product_name,
        "location": location,
        "description": description,
    }
    try:
        product = ProductService.create_product(
            db,
            storage,
            settings.placeholder_picture_url,
            picture=picture,
            **form,
        )
    except FORM_ERRORS as exc:
        logger.info("product_rejected user=%s reason=%s", user.username, exc.message)
        return HTMLResponse(
            pages.product_form(user, error=exc.message, values=form),
            status_code=exc.http_status,
        )
    return RedirectResponse(f"/product/{product.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/product/{product_id}", response_class=HTMLResponse)
def show_product(
    product_id: str,
    db: Session = Depends(get_db),
    storage: BaseStorageBackend = Depends(get_storage),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    product = ProductService.get_product(db, parse_id(product_id, "Product"))
    return pages.product_detail(product, user, resolve=storage.retrieve_url)
