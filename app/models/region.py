"""
SQLModel-based region models

A Region is a labelled polygon drawn on an image. The same label may be
used on several regions of one image, so image id lists derived from
region labels have to be de-duplicated per image.
"""

from typing import Any

from sqlalchemy import JSON, ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel


class RegionLabels(SQLModel, table=True):
    """Database table for region labels (scoped to an image type)."""

    __tablename__ = "region_labels"

    __table_args__ = (
        ForeignKeyConstraint(
            ["of_image_type_id"],
            ["image_types.image_type_id"],
            ondelete="CASCADE",
            name="fk_region_labels_of_image_type_id",
        ),
        Index("idx_region_labels_of_image_type_id", "of_image_type_id"),
    )

    region_label_id: int | None = Field(default=None, primary_key=True)
    of_image_type_id: int = Field(foreign_key="image_types.image_type_id")
    display_name: str = Field(max_length=256)
    color: str = Field(default="#000000", max_length=7)


class Regions(SQLModel, table=True):
    """
    Database table for regions.

    border is a list of {"x", "y"} vertices; holes is a list of such lists.
    """

    __tablename__ = "regions"

    __table_args__ = (
        ForeignKeyConstraint(
            ["of_image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            name="fk_regions_of_image_id",
        ),
        ForeignKeyConstraint(
            ["label_id"],
            ["region_labels.region_label_id"],
            ondelete="SET NULL",
            name="fk_regions_label_id",
        ),
        Index("idx_regions_of_image_id", "of_image_id"),
        Index("idx_regions_label_id", "label_id"),
    )

    region_id: int | None = Field(default=None, primary_key=True)
    of_image_id: int = Field(foreign_key="images.image_id")
    drawn_by_user_id: int = Field(default=0)
    labeled_by_user_id: int = Field(default=0)
    border: list[dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    holes: list[list[dict[str, Any]]] = Field(default_factory=list, sa_type=JSON)
    label_id: int | None = Field(default=None, foreign_key="region_labels.region_label_id")
