from pydantic import BaseModel, Field, field_validator

from domain.enums import PrepCategory, Shift

# Largest value a 32-bit INTEGER column holds
MAX_STEP_NUMBER = 2**31 - 1


def _required(label: str):
    def check(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError(f"{label} cannot be empty")
        return v

    return check


class ProductCreate(BaseModel):
    """Fields submitted by the new-product form"""

    supplier_name: str = Field(..., max_length=255)
    product_name: str = Field(..., max_length=255)
    location: str = Field(..., max_length=255)
    description: str

    check_supplier = field_validator("supplier_name", mode="before")(
        _required("Supplier name")
    )
    check_product = field_validator("product_name", mode="before")(_required("Product name"))
    check_location = field_validator("location", mode="before")(_required("Location"))
    check_description = field_validator("description", mode="before")(
        _required("Description")
    )


class PreparationCreate(BaseModel):
    """Fields submitted by the new-preparation form"""

    name: str = Field(..., max_length=255)
    category: PrepCategory
    shift: Shift
    location: str = Field(..., max_length=255)
    steps: str

    check_name = field_validator("name", mode="before")(_required("Preparation name"))
    check_location = field_validator("location", mode="before")(_required("Location"))
    check_steps = field_validator("steps", mode="before")(_required("Steps"))

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, v):
        try:
            return PrepCategory((v or "").strip().lower())
        except (ValueError, AttributeError):
            raise ValueError("Invalid preparation category")

    @field_validator("shift", mode="before")
    @classmethod
    def check_shift(cls, v):
        try:
            return Shift((v or "").strip().lower())
        except (ValueError, AttributeError):
            raise ValueError("Invalid shift selection")


class PreparationStepCreate(BaseModel):
    """A single numbered step; step numbers are positive but need not be contiguous"""

    step_number: int = Field(..., gt=0, le=MAX_STEP_NUMBER)
    description: str

    check_description = field_validator("description", mode="before")(
        _required("Step description")
    )

    @field_validator("step_number", mode="before")
    @classmethod
    def check_step_number(cls, v):
        if isinstance(v, bool):
            raise ValueError("Step number must be a whole number")
        try:
            number = int(str(v).strip())
        except (TypeError, ValueError):
            raise ValueError("Step number must be a whole number")
        if number < 1:
            raise ValueError("Step number must be at least 1")
        if number > MAX_STEP_NUMBER:
            raise ValueError("Step number is too large")
        return number
