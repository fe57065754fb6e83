"""
SQLModel-based ImageTypes model

Image types classify images (e.g. "chest x-ray", "pap smear"); each image
points at zero or one type. Listings join to this table for display only.
"""

from sqlmodel import Field, SQLModel


class ImageTypes(SQLModel, table=True):
    """Database table for image types."""

    __tablename__ = "image_types"

    image_type_id: int | None = Field(default=None, primary_key=True)
    display_name: str = Field(max_length=256)
    has_predictive_model: bool = Field(default=False)
