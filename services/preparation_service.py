from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from adapters.storage_adapter import BaseStorageBackend, ImageUpload
from app.exceptions import ConflictError, NotFoundError
from domain.models import Preparation, PreparationStep
from domain.schemas import PreparationCreate, PreparationStepCreate, parse_form
from repositories import PreparationRepository, PreparationStepRepository

logger = logging.getLogger("kitchen.preparations")


class StepDraft:
    """A step submitted together with a new preparation"""

    def __init__(self, index: int, description: str = "", picture: Optional[ImageUpload] = None):
        self.index = index
        self.description = description
        self.picture = picture


class PreparationService:
    """Business logic for preparations and their ordered steps"""

    @staticmethod
    def list_preparations(db: Session) -> List[Preparation]:
        """All preparations, newest first"""
        preparations = PreparationRepository(db).list_all()
        logger.info(f"preparations_listed count={len(preparations)}")
        return preparations

    @staticmethod
    def get_preparation(db: Session, preparation_id: UUID) -> Preparation:
        preparation = PreparationRepository(db).get_by_id(preparation_id)
        if preparation is None:
            logger.warning(f"preparation_not_found preparation_id={preparation_id}")
            raise NotFoundError("Preparation not found")
        return preparation

    @staticmethod
    def get_preparation_with_steps(
        db: Session, preparation_id: UUID
    ) -> Tuple[Preparation, List[PreparationStep]]:
        preparation = PreparationService.get_preparation(db, preparation_id)
        steps = PreparationStepRepository(db).list_by_preparation(preparation_id)
        return preparation, steps

    @staticmethod
    def get_step(db: Session, preparation_id: UUID, step_id: UUID) -> PreparationStep:
        step = PreparationStepRepository(db).get_by_id(step_id)
        if step is None or step.preparation_id != preparation_id:
            raise NotFoundError("Preparation step not found")
        return step

    @staticmethod
    def create_preparation(
        db: Session,
        storage: BaseStorageBackend,
        picture: Optional[ImageUpload] = None,
        step_drafts: Optional[List[StepDraft]] = None,
        **form,
    ) -> Preparation:
        """
        Create a preparation and any steps submitted with it.

        Steps are numbered 1..n following the order of their form indexes.
        Drafts without a description are dropped. Every upload is validated
        before the first one is stored, and every image is stored before the
        preparation and its steps are inserted in a single transaction.
        """
        data = parse_form(PreparationCreate, **form)

        drafts = sorted(
            (d for d in (step_drafts or []) if (d.description or "").strip()),
            key=lambda d: d.index,
        )
        uploads = [picture] if picture is not None else []
        uploads.extend(d.picture for d in drafts if d.picture is not None)
        for upload in uploads:
            storage.validate(upload.content, upload.filename)

        picture_url = None
        if picture is not None:
            picture_url = storage.store(picture.content, picture.filename)

        step_records = []
        for number, draft in enumerate(drafts, start=1):
            step_picture_url = None
            if draft.picture is not None:
                step_picture_url = storage.store(draft.picture.content, draft.picture.filename)
            step_records.append(
                PreparationStep(
                    step_number=number,
                    description=draft.description.strip(),
                    picture_url=step_picture_url,
                )
            )

        preparation = PreparationRepository(db).create_preparation(
            name=data.name,
            category=data.category,
            shift=data.shift,
            location=data.location,
            steps=data.steps,
            picture_url=picture_url,
            step_records=step_records,
        )
        logger.info(
            f"preparation_created preparation_id={preparation.id} "
            f"category={preparation.category.value} steps={len(step_records)}"
        )
        return preparation

    @staticmethod
    def add_step(
        db: Session,
        storage: BaseStorageBackend,
        preparation_id: UUID,
        picture: Optional[ImageUpload] = None,
        **form,
    ) -> PreparationStep:
        """
        Append a numbered step to an existing preparation.

        Raises:
            NotFoundError: unknown preparation
            ConflictError: the step number is already used by this preparation
        """
        PreparationService.get_preparation(db, preparation_id)
        data = parse_form(PreparationStepCreate, **form)

        step_repo = PreparationStepRepository(db)
        if picture is not None:
            storage.validate(picture.content, picture.filename)
        # Checked up front so a duplicate does not leave an orphaned upload behind
        if step_repo.get_by_preparation_and_number(preparation_id, data.step_number):
            raise ConflictError(step_repo.conflict_message)

        picture_url = None
        if picture is not None:
            picture_url = storage.store(picture.content, picture.filename)
        step = step_repo.create_step(
            preparation_id=preparation_id,
            step_number=data.step_number,
            description=data.description,
            picture_url=picture_url,
        )
        logger.info(
            f"preparation_step_created preparation_id={preparation_id} "
            f"step_number={step.step_number}"
        )
        return step

