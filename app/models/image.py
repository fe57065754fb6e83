"""
SQLModel-based Image models

This module defines the Images database model using SQLModel, which combines
SQLAlchemy and Pydantic functionality. The inheritance structure is:

ImageBase (shared public fields)
    ├─> Images (database table, adds key, file names and type reference)
    └─> ImageResponse (API schema, defined in app/schemas)

Publisher/publish time and verifier/verify time hold 0 until the image
reaches the matching status, so any predicate on them must also restrict
the status (see app/services/image_filter.py).
"""

from pydantic import field_validator
from sqlalchemy import BigInteger, ForeignKeyConstraint, Index, SmallInteger, Text
from sqlmodel import Field, SQLModel

from app.config import VALID_IMAGE_STATUSES, ImageStatus


class ImageBase(SQLModel):
    """
    Base model with shared public fields for Images.

    These fields are safe to expose via the API and are shared between:
    - The database table (Images)
    - API response schemas (ImageResponse)
    """

    # Upload / publish / verify bookkeeping (0 means "not yet")
    uploaded_by_user_id: int = Field(default=0)
    upload_time: int = Field(default=0, sa_type=BigInteger)
    published_by_user_id: int = Field(default=0)
    publish_time: int = Field(default=0, sa_type=BigInteger)
    verified_by_user_id: int = Field(default=0)
    verify_time: int = Field(default=0, sa_type=BigInteger)

    # File information
    original_file_name: str = Field(default="", max_length=256)

    # Metadata
    description: str = Field(default="", sa_type=Text)

    # Status
    status: int = Field(
        default=ImageStatus.UPLOADED,
        sa_type=SmallInteger,
        description="Image status: 0=Uploaded, 1=Published, 2=Verified, 3=Excluded",
    )

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: int) -> int:
        """Validate that status is one of the allowed ImageStatus constants."""
        if v not in VALID_IMAGE_STATUSES:
            raise ValueError(
                f"Invalid image status: {v}. Must be one of {sorted(VALID_IMAGE_STATUSES)} "
                f"(0=Uploaded, 1=Published, 2=Verified, 3=Excluded)"
            )
        return v


class Images(ImageBase, table=True):
    """
    Database table for images.

    Extends ImageBase with:
    - Primary key
    - Stored file names of the original and thumbnail files
    - Optional reference to the image type (NULL means "no type")
    """

    __tablename__ = "images"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_type_id"],
            ["image_types.image_type_id"],
            ondelete="SET NULL",
            name="fk_images_image_type_id",
        ),
        Index("idx_images_upload_time", "upload_time"),
        Index("idx_images_publish_time", "publish_time"),
        Index("idx_images_verify_time", "verify_time"),
        Index("idx_images_original_file_name", "original_file_name"),
        Index("idx_images_image_type_id", "image_type_id"),
    )

    # Primary key
    image_id: int | None = Field(default=None, primary_key=True)

    # Stored files
    original_image_filename: str = Field(default="", max_length=256)
    thumbnail_image_filename: str = Field(default="", max_length=256)

    # Type reference
    image_type_id: int | None = Field(default=None, foreign_key="image_types.image_type_id")

    # Note: Relationships are intentionally omitted.
    # The image type is fetched with an explicit LEFT OUTER JOIN by the query
    # layer, which keeps the join to-one and under our control.
