"""Catalog search route"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from typing import Optional

from api import pages
from api.dependencies import get_db, get_optional_user
from domain.schemas import AuthenticatedUser
from services.search_service import search_catalog

router = APIRouter(tags=["Search"])


@router.get("/search", response_class=HTMLResponse)
def search(
    q: str = Query(""),
    db: Session = Depends(get_db),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    """Products and preparations whose text matches ``q``"""
    products, preparations = search_catalog(db, q)
    return pages.search_results(q, products, preparations, user)
