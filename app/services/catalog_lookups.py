"""
Read-only lookups into the entities that sit next to images.

The filter resolver and the image list service depend on these Protocols
rather than on concrete tables, and receive implementations through their
constructors. The Sql* classes below are the database-backed
implementations used by the API.

Every lookup that takes a list of ids returns results aligned with that
list (one entry per requested id, in request order).
"""

from collections import defaultdict
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InternalError
from app.core.logging import get_logger
from app.models.bookmark import UserBookmarksImages
from app.models.image_tag import ImageHasImageTags, ImageTags
from app.models.region import RegionLabels, Regions
from app.services.records import (
    ImageTagRecord,
    RegionRecord,
    image_tag_record_from_row,
    region_record_from_row,
)

logger = get_logger(__name__)


class ImageTagLookup(Protocol):
    async def get_image_ids_of_image_tags(self, image_tag_ids: list[int]) -> list[list[int]]:
        """For each tag id, the ids of images holding that tag."""
        ...

    async def get_image_tags_of_images(self, image_ids: list[int]) -> list[list[ImageTagRecord]]:
        """For each image id, the tags on that image."""
        ...


class RegionLookup(Protocol):
    async def get_image_ids_of_region_labels(self, region_label_ids: list[int]) -> list[list[int]]:
        """For each label id, the (de-duplicated) ids of images with a region carrying it."""
        ...

    async def get_regions_of_images(self, image_ids: list[int]) -> list[list[RegionRecord]]:
        """For each image id, the regions drawn on that image."""
        ...


class BookmarkLookup(Protocol):
    async def get_bookmarked_image_ids(self, user_ids: list[int]) -> list[int]:
        """Ids of images bookmarked by any of `user_ids` (may contain duplicates)."""
        ...


class SqlImageTagLookup:
    """ImageTagLookup backed by the image_has_image_tags table."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_image_ids_of_image_tags(self, image_tag_ids: list[int]) -> list[list[int]]:
        if not image_tag_ids:
            return []
        try:
            result = await self.db.execute(
                select(ImageHasImageTags.image_tag_id, ImageHasImageTags.image_id)  # type: ignore[call-overload]
                .where(ImageHasImageTags.image_tag_id.in_(image_tag_ids))  # type: ignore[attr-defined]
                .order_by(ImageHasImageTags.image_tag_id, ImageHasImageTags.image_id)
            )
            rows = result.all()
        except SQLAlchemyError as error:
            logger.error(
                "image_tag_membership_query_failed", image_tag_ids=image_tag_ids, error=str(error)
            )
            raise InternalError(
                "failed to get image id list of image tag list", image_tag_ids=image_tag_ids
            ) from error

        image_ids_by_tag: dict[int, list[int]] = defaultdict(list)
        for image_tag_id, image_id in rows:
            image_ids_by_tag[int(image_tag_id)].append(int(image_id))
        return [image_ids_by_tag.get(image_tag_id, []) for image_tag_id in image_tag_ids]

    async def get_image_tags_of_images(self, image_ids: list[int]) -> list[list[ImageTagRecord]]:
        if not image_ids:
            return []
        try:
            result = await self.db.execute(
                select(ImageHasImageTags.image_id, ImageTags)  # type: ignore[call-overload]
                .join(ImageTags, ImageTags.image_tag_id == ImageHasImageTags.image_tag_id)  # type: ignore[arg-type]
                .where(ImageHasImageTags.image_id.in_(image_ids))  # type: ignore[attr-defined]
                .order_by(ImageHasImageTags.image_id, ImageTags.image_tag_id)
            )
            rows = result.all()
        except SQLAlchemyError as error:
            logger.error("image_tag_list_query_failed", image_ids=image_ids, error=str(error))
            raise InternalError(
                "failed to get image tag list of image list", image_ids=image_ids
            ) from error

        tags_by_image: dict[int, list[ImageTagRecord]] = defaultdict(list)
        for image_id, image_tag in rows:
            tags_by_image[int(image_id)].append(image_tag_record_from_row(image_tag))
        return [tags_by_image.get(image_id, []) for image_id in image_ids]


class SqlRegionLookup:
    """RegionLookup backed by the regions and region_labels tables."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_image_ids_of_region_labels(self, region_label_ids: list[int]) -> list[list[int]]:
        if not region_label_ids:
            return []
        try:
            result = await self.db.execute(
                select(Regions.label_id, Regions.of_image_id)  # type: ignore[call-overload]
                .where(Regions.label_id.in_(region_label_ids))  # type: ignore[union-attr]
                .distinct()
                .order_by(Regions.label_id, Regions.of_image_id)
            )
            rows = result.all()
        except SQLAlchemyError as error:
            logger.error(
                "region_label_membership_query_failed",
                region_label_ids=region_label_ids,
                error=str(error),
            )
            raise InternalError(
                "failed to get image id list of region label list",
                region_label_ids=region_label_ids,
            ) from error

        image_ids_by_label: dict[int, list[int]] = defaultdict(list)
        for label_id, image_id in rows:
            image_ids_by_label[int(label_id)].append(int(image_id))
        return [image_ids_by_label.get(label_id, []) for label_id in region_label_ids]

    async def get_regions_of_images(self, image_ids: list[int]) -> list[list[RegionRecord]]:
        if not image_ids:
            return []
        try:
            result = await self.db.execute(
                select(Regions, RegionLabels)
                .outerjoin(RegionLabels, Regions.label_id == RegionLabels.region_label_id)  # type: ignore[arg-type]
                .where(Regions.of_image_id.in_(image_ids))  # type: ignore[attr-defined]
                .order_by(Regions.of_image_id, Regions.region_id)
            )
            rows = result.all()
        except SQLAlchemyError as error:
            logger.error("region_list_query_failed", image_ids=image_ids, error=str(error))
            raise InternalError(
                "failed to get region list of image list", image_ids=image_ids
            ) from error

        regions_by_image: dict[int, list[RegionRecord]] = defaultdict(list)
        for region, label in rows:
            regions_by_image[int(region.of_image_id)].append(region_record_from_row(region, label))
        return [regions_by_image.get(image_id, []) for image_id in image_ids]


class SqlBookmarkLookup:
    """BookmarkLookup backed by the user_bookmarks_images table."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_bookmarked_image_ids(self, user_ids: list[int]) -> list[int]:
        if not user_ids:
            return []
        try:
            result = await self.db.execute(
                select(UserBookmarksImages.image_id)  # type: ignore[call-overload]
                .where(UserBookmarksImages.user_id.in_(user_ids))  # type: ignore[attr-defined]
                .order_by(UserBookmarksImages.image_id)
            )
            return [int(image_id) for image_id in result.scalars().all()]
        except SQLAlchemyError as error:
            logger.error("bookmark_query_failed", user_ids=user_ids, error=str(error))
            raise InternalError(
                "failed to get bookmarked image list of user list", user_ids=user_ids
            ) from error
