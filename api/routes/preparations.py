"""Preparation and preparation step routes"""

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
import logging
from typing import List, Optional

from adapters.storage_adapter import BaseStorageBackend, ImageUpload
from api import pages
from api.dependencies import (
    get_db,
    get_optional_user,
    get_picture,
    get_step_drafts,
    get_storage,
    parse_id,
    require_user,
)
from app.exceptions import FORM_ERRORS
from domain.schemas import AuthenticatedUser
from services.preparation_service import PreparationService, StepDraft

router = APIRouter(tags=["Preparations"])
logger = logging.getLogger("kitchen.api.preparations")


@router.get("/preparations", response_class=HTMLResponse)
def list_preparations(
    db: Session = Depends(get_db),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    return pages.preparation_list(PreparationService.list_preparations(db), user)


@router.get("/preparation/new", response_class=HTMLResponse)
def new_preparation_form(user: AuthenticatedUser = Depends(require_user)):
    return pages.preparation_form(user)


@router.post("/preparation")
def create_preparation(
    name: str = Form(""),
    category: str = Form(""),
    shift: str = Form(""),
    location: str = Form(""),
    steps: str = Form(""),
    picture: Optional[ImageUpload] = Depends(get_picture),
    step_drafts: List[StepDraft] = Depends(get_step_drafts),
    user: AuthenticatedUser = Depends(require_user),
    db: Session = Depends(get_db),
    storage: BaseStorageBackend = Depends(get_storage),
):
    """
    Create a preparation, optionally with a picture and numbered steps.

    Steps arrive as ``step_description_N`` / ``step_image_N`` pairs.
    """
    form = {
        "name": name,
        "category": category,
        "shift": shift,
        "location": location,
        "steps": steps,
    }
    try:
        preparation = PreparationService.create_preparation(
            db, storage, picture=picture, step_drafts=step_drafts, **form
        )
    except FORM_ERRORS as exc:
        logger.info("preparation_rejected user=%s reason=%s", user.username, exc.message)
        values = dict(form)
        values.update(
            {f"step_description_{d.index}": d.description for d in step_drafts}
        )
        return HTMLResponse(
            pages.preparation_form(user, error=exc.message, values=values),
            status_code=exc.http_status,
        )
    return RedirectResponse(
        f"/preparation/{preparation.id}", status_code=status.HTTP_303_SEE_OTHER
    )


@router.get("/preparation/{preparation_id}", response_class=HTMLResponse)
def show_preparation(
    preparation_id: str,
    db: Session = Depends(get_db),
    storage: BaseStorageBackend = Depends(get_storage),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    preparation, steps = PreparationService.get_preparation_with_steps(
        db, parse_id(preparation_id, "Preparation")
    )
    return pages.preparation_detail(preparation, steps, user, resolve=storage.retrieve_url)


@router.get("/preparation/{preparation_id}/steps", response_class=HTMLResponse)
def list_steps(
    preparation_id: str,
    db: Session = Depends(get_db),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    preparation, steps = PreparationService.get_preparation_with_steps(
        db, parse_id(preparation_id, "Preparation")
    )
    return pages.step_list(preparation, steps, user)


@router.get("/preparation/{preparation_id}/step/new", response_class=HTMLResponse)
def new_step_form(
    preparation_id: str,
    user: AuthenticatedUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    preparation = PreparationService.get_preparation(
        db, parse_id(preparation_id, "Preparation")
    )
    return pages.step_form(preparation, user)


@router.post("/preparation/{preparation_id}/step")
def create_step(
    preparation_id: str,
    step_number: str = Form(""),
    description: str = Form(""),
    picture: Optional[ImageUpload] = Depends(get_picture),
    user: AuthenticatedUser = Depends(require_user),
    db: Session = Depends(get_db),
    storage: BaseStorageBackend = Depends(get_storage),
):
    """Add a numbered step; a number already used by the preparation is a 409"""
    prep_id = parse_id(preparation_id, "Preparation")
    preparation = PreparationService.get_preparation(db, prep_id)
    form = {"step_number": step_number.strip(), "description": description}
    try:
        PreparationService.add_step(db, storage, prep_id, picture=picture, **form)
    except FORM_ERRORS as exc:
        logger.info(
            "preparation_step_rejected preparation_id=%s reason=%s", prep_id, exc.message
        )
        return HTMLResponse(
            pages.step_form(preparation, user, error=exc.message, values=form),
            status_code=exc.http_status,
        )
    return RedirectResponse(
        f"/preparation/{prep_id}", status_code=status.HTTP_303_SEE_OTHER
    )


@router.get("/preparation/{preparation_id}/step/{step_id}", response_class=HTMLResponse)
def show_step(
    preparation_id: str,
    step_id: str,
    db: Session = Depends(get_db),
    storage: BaseStorageBackend = Depends(get_storage),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    prep_id = parse_id(preparation_id, "Preparation")
    preparation = PreparationService.get_preparation(db, prep_id)
    step = PreparationService.get_step(db, prep_id, parse_id(step_id, "Preparation step"))
    return pages.step_detail(preparation, step, user, resolve=storage.retrieve_url)
