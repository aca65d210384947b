"""
Product Repository - Data access layer for the product catalog
"""

from typing import List
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Product


class ProductRepository(BaseRepository[Product]):
    """Repository for product data access"""

    def __init__(self, db: Session):
        super().__init__(db, Product)

    def create_product(
        self,
        supplier_name: str,
        product_name: str,
        location: str,
        picture_url: str,
        description: str,
    ) -> Product:
        """Create a new product"""
        product = Product(
            supplier_name=supplier_name,
            product_name=product_name,
            location=location,
            picture_url=picture_url,
            description=description,
        )
        return self.create(product)

    def search(self, term: str) -> List[Product]:
        """Case-insensitive substring match on the product's text fields"""
        pattern = f"%{term}%"
        stmt = (
            select(Product)
            .where(
                or_(
                    Product.product_name.ilike(pattern),
                    Product.supplier_name.ilike(pattern),
                    Product.location.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )
            .order_by(Product.product_name)
        )
        return list(self.db.scalars(stmt))
