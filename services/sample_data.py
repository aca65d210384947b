"""
Sample catalog rows for a fresh installation.

Three products and three preparations with numbered steps, inserted only
into an empty catalog.
"""

import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from domain.enums import PrepCategory, Shift
from domain.models import PreparationStep
from repositories import PreparationRepository, ProductRepository

logger = logging.getLogger("kitchen.sample_data")

SAMPLE_PRODUCTS = [
    {
        "supplier_name": "Fresh Farm Co.",
        "product_name": "Organic Tomatoes",
        "location": "Cold Room A - Shelf 2",
        "description": "Fresh organic tomatoes. Store at 4°C. Check daily for spoilage. "
        "Shelf life: 5-7 days.",
    },
    {
        "supplier_name": "Ocean Catch Ltd.",
        "product_name": "Atlantic Salmon Fillet",
        "location": "Freezer B - Drawer 3",
        "description": "Premium Atlantic salmon. Keep frozen at -18°C. Thaw in refrigerator "
        "overnight before use. Use within 24 hours of thawing.",
    },
    {
        "supplier_name": "Dairy Delights",
        "product_name": "Full Cream Milk",
        "location": "Refrigerator - Door Shelf",
        "description": "Pasteurized full cream milk. Store at 4°C. Check use-by date daily. "
        "Once opened, use within 3 days.",
    },
]

SAMPLE_PREPARATIONS = [
    {
        "name": "Diced Tomatoes",
        "category": PrepCategory.VEGETABLE,
        "shift": Shift.BOTH,
        "location": "Prep Station 1",
        "steps": [
            "Wash tomatoes thoroughly under cold running water",
            "Remove the stem and core with a paring knife",
            "Cut tomatoes in half from top to bottom",
            "Place cut side down and slice into 1cm strips",
            "Rotate 90 degrees and dice into 1cm cubes",
            "Store in airtight container in cold room",
            "Label with date and time - use within 24 hours",
        ],
    },
    {
        "name": "Bread Roll Portioning",
        "category": PrepCategory.BREAD,
        "shift": Shift.BREAKFAST,
        "location": "Bread Station",
        "steps": [
            "Check bread delivery and verify freshness",
            "Count required portions for morning service",
            "Place rolls on clean tray lined with parchment paper",
            "Cover with clean tea towel to prevent drying",
            "Store at room temperature away from heat",
            "Warm in oven at 180°C for 3-4 minutes before service",
            "Serve immediately while warm",
        ],
    },
    {
        "name": "Salmon Portioning",
        "category": PrepCategory.SEAFOOD,
        "shift": Shift.LUNCH,
        "location": "Fish Prep Area",
        "steps": [
            "Remove salmon from cold storage (must be 4°C or below)",
            "Ensure cutting board and knife are sanitized",
            "Remove pin bones using fish tweezers",
            "Pat dry with paper towel",
            "Cut into 180g portions using sharp filleting knife",
            "Check for any remaining bones",
            "Place portions on tray lined with parchment",
            "Cover with plastic wrap and return to cold storage",
            "Label with prep date and use-by date (24 hours)",
            "Wash hands and sanitize work area immediately after",
        ],
    },
]


def seed_sample_catalog(db: Session, placeholder_url: str) -> Tuple[int, int]:
    """
    Insert the sample products and preparations into an empty catalog.

    Returns:
        (products, preparations) inserted; (0, 0) when any product or
        preparation already exists.
    """
    product_repo = ProductRepository(db)
    prep_repo = PreparationRepository(db)
    if product_repo.list_all() or prep_repo.list_all():
        logger.info("sample_catalog_skipped reason=catalog_not_empty")
        return 0, 0

    for product in SAMPLE_PRODUCTS:
        product_repo.create_product(picture_url=placeholder_url, **product)

    for sample in SAMPLE_PREPARATIONS:
        lines: List[str] = sample["steps"]
        prep_repo.create_preparation(
            name=sample["name"],
            category=sample["category"],
            shift=sample["shift"],
            location=sample["location"],
            steps="\n".join(f"{n}. {line}" for n, line in enumerate(lines, start=1)),
            step_records=[
                PreparationStep(step_number=n, description=line)
                for n, line in enumerate(lines, start=1)
            ],
        )

    logger.info(
        "sample_catalog_seeded products=%d preparations=%d",
        len(SAMPLE_PRODUCTS),
        len(SAMPLE_PREPARATIONS),
    )
    return len(SAMPLE_PRODUCTS), len(SAMPLE_PREPARATIONS)
