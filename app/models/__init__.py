"""
SQLModel models - database schema for the image catalog.

Importing this package registers every table with SQLModel.metadata.
"""

from app.models.bookmark import UserBookmarksImages
from app.models.image import Images
from app.models.image_tag import ImageHasImageTags, ImageTagGroups, ImageTags
from app.models.image_type import ImageTypes
from app.models.region import RegionLabels, Regions

__all__ = [
    # Core entity models
    "Images",
    "ImageTypes",
    "ImageTagGroups",
    "ImageTags",
    "RegionLabels",
    "Regions",
    # Junction/relationship tables
    "ImageHasImageTags",
    "UserBookmarksImages",
]
