"""
Preparation Repository - Data access layer for preparations and their steps
"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Preparation, PreparationStep
from domain.enums import PrepCategory, Shift
from domain.schemas.catalog_schemas import MAX_STEP_NUMBER
from app.exceptions import ServiceValidationError


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ServiceValidationError(
            f"Invalid {label} '{value}'. Allowed: {allowed}",
            details={label: value},
        )


class PreparationRepository(BaseRepository[Preparation]):
    """Repository for preparation data access"""

    def __init__(self, db: Session):
        super().__init__(db, Preparation)

    def create_preparation(
        self,
        name: str,
        category,
        shift,
        location: str,
        steps: str,
        picture_url: Optional[str] = None,
        step_records: Optional[List[PreparationStep]] = None,
    ) -> Preparation:
        """
        Create a new preparation; category and shift must be enum members or their values.

        ``step_records`` are inserted in the same transaction as the preparation.
        """
        preparation = Preparation(
            name=name,
            category=_coerce(PrepCategory, category, "category"),
            shift=_coerce(Shift, shift, "shift"),
            location=location,
            steps=steps,
            picture_url=picture_url,
            step_records=list(step_records or []),
        )
        return self.create(preparation)

    def search(self, term: str) -> List[Preparation]:
        """Case-insensitive substring match on name, location and steps text"""
        pattern = f"%{term}%"
        conditions = [
            Preparation.name.ilike(pattern),
            Preparation.location.ilike(pattern),
            Preparation.steps.ilike(pattern),
        ]
        # Enum columns are matched on their stored values
        lowered = term.strip().lower()
        categories = [c for c in PrepCategory if lowered and lowered in c.value]
        shifts = [s for s in Shift if lowered and lowered in s.value]
        if categories:
            conditions.append(Preparation.category.in_(categories))
        if shifts:
            conditions.append(Preparation.shift.in_(shifts))
        stmt = select(Preparation).where(or_(*conditions)).order_by(Preparation.name)
        return list(self.db.scalars(stmt))


class PreparationStepRepository(BaseRepository[PreparationStep]):
    """Repository for preparation step data access"""

    conflict_message = "A step with this number already exists for the preparation"

    def __init__(self, db: Session):
        super().__init__(db, PreparationStep)

    def list_by_preparation(self, preparation_id: UUID) -> List[PreparationStep]:
        """Steps of a preparation in ascending step number order"""
        stmt = (
            select(PreparationStep)
            .where(PreparationStep.preparation_id == preparation_id)
            .order_by(PreparationStep.step_number.asc())
        )
        return list(self.db.scalars(stmt))

    def get_by_preparation_and_number(
        self, preparation_id: UUID, step_number: int
    ) -> Optional[PreparationStep]:
        stmt = select(PreparationStep).where(
            PreparationStep.preparation_id == preparation_id,
            PreparationStep.step_number == step_number,
        )
        return self.db.scalars(stmt).first()

    def create_step(
        self,
        preparation_id: UUID,
        step_number: int,
        description: str,
        picture_url: Optional[str] = None,
    ) -> PreparationStep:
        """Create a step; a duplicate step number for the same preparation raises ConflictError"""
        if not 1 <= step_number <= MAX_STEP_NUMBER:
            raise ServiceValidationError(
                f"Step number must be between 1 and {MAX_STEP_NUMBER}"
            )
        step = PreparationStep(
            preparation_id=preparation_id,
            step_number=step_number,
            description=description,
            picture_url=picture_url,
        )
        return self.create(step)
