"""
Catalog models: products, preparations and their ordered steps.
"""

from sqlalchemy import (
    Column,
    Text,
    String,
    Integer,
    TIMESTAMP,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base, utcnow
from domain.enums import PrepCategory, Shift, enum_values


class Product(Base):
    """Ingredient or supply kept in the kitchen"""

    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    supplier_name = Column(String(255), nullable=False)
    product_name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    picture_url = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    __table_args__ = (
        Index("idx_products_supplier", "supplier_name"),
        Index("idx_products_location", "location"),
    )


class Preparation(Base):
    """Recipe or procedure with ordered steps"""

    __tablename__ = "preparations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    # Stored as VARCHAR with a CHECK constraint listing the allowed values
    category = Column(
        SQLEnum(
            PrepCategory,
            name="prep_category",
            native_enum=False,
            create_constraint=True,
            values_callable=enum_values,
            length=50,
        ),
        nullable=False,
    )
    shift = Column(
        SQLEnum(
            Shift,
            name="prep_shift",
            native_enum=False,
            create_constraint=True,
            values_callable=enum_values,
            length=50,
        ),
        nullable=False,
    )
    location = Column(String(255), nullable=False)
    steps = Column(Text, nullable=False)
    picture_url = Column(String(500))
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    step_records = relationship(
        "PreparationStep",
        back_populates="preparation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PreparationStep.step_number",
    )

    __table_args__ = (
        Index("idx_preparations_category", "category"),
        Index("idx_preparations_shift", "shift"),
    )


class PreparationStep(Base):
    """One numbered instruction of a preparation"""

    __tablename__ = "preparation_steps"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    preparation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("preparations.id", ondelete="CASCADE"),
        nullable=False,
    )
    step_number = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)
    picture_url = Column(String(500))
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    preparation = relationship("Preparation", back_populates="step_records")

    __table_args__ = (
        UniqueConstraint(
            "preparation_id", "step_number", name="uq_preparation_steps_number"
        ),
        CheckConstraint("step_number > 0", name="ck_preparation_steps_positive"),
        Index("idx_prep_steps_preparation", "preparation_id"),
    )
