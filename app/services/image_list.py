"""
Image list service.

Entry point for the three catalog read operations:

- get_image_list: a page of images plus total count, optionally with the
  tags and regions of every image on the page
- get_image_id_list: a page of image ids plus total count
- get_image_position_in_list: an image's 1-based rank, the total count and
  its previous/next neighbor under a filter and sort order

Position queries only ever look "forward". Rows before image X under order
o are exactly the rows after X under o.opposite(), so the same
after-image condition serves both counting the rows ahead of X and
fetching its previous neighbor.

The four position queries are separate statements without a shared
snapshot. A concurrent write between them can make the rank and the
neighbors disagree by one; that is acceptable for a navigation aid.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.core.logging import bound_context, get_logger
from app.schemas.image import ImageListFilterOptions
from app.services import image_query
from app.services.catalog_lookups import (
    BookmarkLookup,
    ImageTagLookup,
    RegionLookup,
    SqlBookmarkLookup,
    SqlImageTagLookup,
    SqlRegionLookup,
)
from app.services.filter_resolver import ImageFilterNormalizer
from app.services.image_filter import ImageFilter
from app.services.image_sort import ImageListSortOrder, parse_sort_order
from app.services.records import (
    ImageIdListResult,
    ImageListResult,
    ImagePosition,
    ImageRecord,
)

logger = get_logger(__name__)


async def get_image_position(
    db: AsyncSession,
    image: ImageRecord,
    sort_order: ImageListSortOrder,
    image_filter: ImageFilter,
) -> ImagePosition:
    """
    Rank and neighbors of `image` within the list defined by `image_filter` and `sort_order`.

    Returns:
        ImagePosition with a 1-based position; prev/next ids are None at the ends
    """
    opposite_order = sort_order.opposite()
    before_image = opposite_order.after_image_clause(image)
    after_image = sort_order.after_image_clause(image)

    total_count = await image_query.count_images(db, image_filter)
    prev_count = await image_query.count_images(db, image_filter, before_image)
    prev_image_ids = await image_query.list_image_ids(
        db, 0, 1, opposite_order, image_filter, before_image
    )
    next_image_ids = await image_query.list_image_ids(
        db, 0, 1, sort_order, image_filter, after_image
    )

    return ImagePosition(
        position=prev_count + 1,
        total_count=total_count,
        prev_image_id=prev_image_ids[0] if prev_image_ids else None,
        next_image_id=next_image_ids[0] if next_image_ids else None,
    )


class ImageListService:
    """
    Catalog read operations over one database session.

    Collaborator lookups are injected through the constructor; use
    ImageListService.from_session() to wire the database-backed ones.
    """

    def __init__(
        self,
        db: AsyncSession,
        image_tag_lookup: ImageTagLookup,
        region_lookup: RegionLookup,
        bookmark_lookup: BookmarkLookup,
    ) -> None:
        self.db = db
        self.image_tag_lookup = image_tag_lookup
        self.region_lookup = region_lookup
        self.filter_normalizer = ImageFilterNormalizer(
            image_tag_lookup, region_lookup, bookmark_lookup
        )

    @classmethod
    def from_session(cls, db: AsyncSession) -> "ImageListService":
        return cls(
            db,
            image_tag_lookup=SqlImageTagLookup(db),
            region_lookup=SqlRegionLookup(db),
            bookmark_lookup=SqlBookmarkLookup(db),
        )

    async def get_image(self, image_id: int) -> ImageRecord:
        """
        Raises:
            NotFoundError: If no image has this id
        """
        image = await image_query.get_image(self.db, image_id)
        if image is None:
            logger.info("image_not_found", image_id=image_id)
            raise NotFoundError(f"no image with image_id {image_id} found", image_id=image_id)
        return image

    async def get_image_list(
        self,
        offset: int,
        limit: int | None,
        sort_order: int | None,
        filter_options: ImageListFilterOptions | None,
        with_image_tag: bool = False,
        with_region: bool = False,
    ) -> ImageListResult:
        """
        Page of images matching `filter_options`, sorted by `sort_order`.

        Raises:
            InvalidArgumentError: On an unknown sort order or filter value
        """
        parsed_sort_order = parse_sort_order(sort_order)
        image_filter = await self.filter_normalizer.normalize(filter_options)

        total_count = await image_query.count_images(self.db, image_filter)
        images = await image_query.list_images(
            self.db, offset, limit, parsed_sort_order, image_filter
        )
        image_ids = [image.image_id for image in images]

        result = ImageListResult(total_count=total_count, images=images)
        if with_image_tag:
            result.image_tags = await self.image_tag_lookup.get_image_tags_of_images(image_ids)
        if with_region:
            result.regions = await self.region_lookup.get_regions_of_images(image_ids)

        logger.debug(
            "image_list_served",
            offset=offset,
            limit=limit,
            sort_order=parsed_sort_order.name,
            total_count=total_count,
            returned_count=len(images),
        )
        return result

    async def get_image_id_list(
        self,
        offset: int,
        limit: int | None,
        sort_order: int | None,
        filter_options: ImageListFilterOptions | None,
    ) -> ImageIdListResult:
        """
        Page of image ids matching `filter_options`, sorted by `sort_order`.

        Raises:
            InvalidArgumentError: On an unknown sort order or filter value
        """
        parsed_sort_order = parse_sort_order(sort_order)
        image_filter = await self.filter_normalizer.normalize(filter_options)

        total_count = await image_query.count_images(self.db, image_filter)
        image_ids = await image_query.list_image_ids(
            self.db, offset, limit, parsed_sort_order, image_filter
        )
        return ImageIdListResult(total_count=total_count, image_ids=image_ids)

    async def get_image_position_in_list(
        self,
        image_id: int,
        sort_order: int | None,
        filter_options: ImageListFilterOptions | None,
    ) -> ImagePosition:
        """
        Position of image `image_id` in the list defined by `filter_options` and `sort_order`.

        Raises:
            InvalidArgumentError: On an unknown sort order or filter value
            NotFoundError: If no image has this id
        """
        parsed_sort_order = parse_sort_order(sort_order)
        with bound_context(image_id=image_id, sort_order=parsed_sort_order.name):
            image_filter = await self.filter_normalizer.normalize(filter_options)
            image = await self.get_image(image_id)
            position = await get_image_position(self.db, image, parsed_sort_order, image_filter)

            logger.debug(
                "image_position_served",
                position=position.position,
                total_count=position.total_count,
                prev_image_id=position.prev_image_id,
                next_image_id=position.next_image_id,
            )
        return position
