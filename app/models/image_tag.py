"""
SQLModel-based image tag models

ImageTagGroups group ImageTags; ImageHasImageTags is the junction table
connecting tags to images. Tag membership is the source for the
"has tag" listing filter.
"""

from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel


class ImageTagGroups(SQLModel, table=True):
    """Database table for image tag groups."""

    __tablename__ = "image_tag_groups"

    image_tag_group_id: int | None = Field(default=None, primary_key=True)
    display_name: str = Field(max_length=256)
    is_single_value: bool = Field(default=False)


class ImageTags(SQLModel, table=True):
    """Database table for image tags."""

    __tablename__ = "image_tags"

    __table_args__ = (
        ForeignKeyConstraint(
            ["of_image_tag_group_id"],
            ["image_tag_groups.image_tag_group_id"],
            ondelete="CASCADE",
            name="fk_image_tags_of_image_tag_group_id",
        ),
        Index("idx_image_tags_of_image_tag_group_id", "of_image_tag_group_id"),
    )

    image_tag_id: int | None = Field(default=None, primary_key=True)
    of_image_tag_group_id: int = Field(foreign_key="image_tag_groups.image_tag_group_id")
    display_name: str = Field(max_length=256)


class ImageHasImageTags(SQLModel, table=True):
    """
    Junction table for image-tag links.

    The composite primary key guarantees a tag is linked to an image at
    most once, so per-tag image id lists never contain duplicates.
    """

    __tablename__ = "image_has_image_tags"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            name="fk_image_has_image_tags_image_id",
        ),
        ForeignKeyConstraint(
            ["image_tag_id"],
            ["image_tags.image_tag_id"],
            ondelete="CASCADE",
            name="fk_image_has_image_tags_image_tag_id",
        ),
        Index("idx_image_has_image_tags_image_tag_id", "image_tag_id"),
    )

    image_id: int = Field(foreign_key="images.image_id", primary_key=True)
    image_tag_id: int = Field(foreign_key="image_tags.image_tag_id", primary_key=True)
