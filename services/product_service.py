from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from adapters.storage_adapter import BaseStorageBackend, ImageUpload
from app.exceptions import NotFoundError
from domain.models import Product
from domain.schemas import ProductCreate, parse_form
from repositories import ProductRepository

logger = logging.getLogger("kitchen.products")


class ProductService:
    """Business logic for the product catalog"""

    @staticmethod
    def list_products(db: Session) -> List[Product]:
        """All products, newest first"""
        products = ProductRepository(db).list_all()
        logger.info(f"products_listed count={len(products)}")
        return products

    @staticmethod
    def get_product(db: Session, product_id: UUID) -> Product:
        product = ProductRepository(db).get_by_id(product_id)
        if product is None:
            logger.warning(f"product_not_found product_id={product_id}")
            raise NotFoundError("Product not found")
        return product

    @staticmethod
    def create_product(
        db: Session,
        storage: BaseStorageBackend,
        placeholder_url: str,
        picture: Optional[ImageUpload] = None,
        **form,
    ) -> Product:
        """
        Validate the form, store the picture (if any), then insert the product.

        Field and upload validation both run before anything is written. When
        no picture is supplied the product points at ``placeholder_url``.
        """
        data = parse_form(ProductCreate, **form)

        picture_url = placeholder_url
        if picture is not None:
            storage.validate(picture.content, picture.filename)
            picture_url = storage.store(picture.content, picture.filename)

        product = ProductRepository(db).create_product(
            supplier_name=data.supplier_name,
            product_name=data.product_name,
            location=data.location,
            picture_url=picture_url,
            description=data.description,
        )
        logger.info(f"product_created product_id={product.id} picture={picture_url}")
        return product
