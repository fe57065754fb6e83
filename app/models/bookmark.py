"""
SQLModel-based UserBookmarksImages model

Users bookmark images with an optional note. Bookmark ownership is the
source for the "bookmarked by" listing filter.
"""

from sqlalchemy import ForeignKeyConstraint, Index, Text
from sqlmodel import Field, SQLModel


class UserBookmarksImages(SQLModel, table=True):
    """Database table for user -> image bookmarks."""

    __tablename__ = "user_bookmarks_images"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            name="fk_user_bookmarks_images_image_id",
        ),
        Index("idx_user_bookmarks_images_image_id", "image_id"),
    )

    # Composite primary key (order matches schema: user_id, image_id)
    user_id: int = Field(primary_key=True)
    image_id: int = Field(foreign_key="images.image_id", primary_key=True)

    description: str = Field(default="", sa_type=Text)
