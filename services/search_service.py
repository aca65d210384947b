from typing import List, Tuple
from sqlalchemy.orm import Session
import logging

from domain.models import Product, Preparation
from repositories import ProductRepository, PreparationRepository

logger = logging.getLogger("kitchen.search")


def search_catalog(db: Session, query: str) -> Tuple[List[Product], List[Preparation]]:
    """Products and preparations whose text fields contain ``query`` (case-insensitive)."""
    term = (query or "").strip()
    if not term:
        return [], []
    products = ProductRepository(db).search(term)
    preparations = PreparationRepository(db).search(term)
    logger.info(
        "catalog_searched q=%r products=%d preparations=%d",
        term,
        len(products),
        len(preparations),
    )
    return products, preparations
