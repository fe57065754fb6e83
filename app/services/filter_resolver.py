"""
Image list filter resolution.

Some filter dimensions cannot be expressed as a predicate on the images
table: tag membership, region-label membership and bookmark ownership.
Each of them is resolved independently into a plain set of image ids and
the sets are intersected in memory, so every extra dimension can only
narrow the result. The intersection becomes the image id restriction of
the normalized ImageFilter.

Resolvers are pure (ids in, ids out) given their lookup; adding a new
dimension means adding one resolver and one entry in
ImageFilterNormalizer._resolve_image_id_sets().
"""

from collections import Counter
from collections.abc import Awaitable, Callable, Iterable
from functools import reduce

from app.config import NO_IMAGE_TYPE_ID, settings
from app.core.errors import InvalidArgumentError
from app.core.logging import get_logger
from app.schemas.image import ImageListFilterOptions
from app.services.catalog_lookups import BookmarkLookup, ImageTagLookup, RegionLookup
from app.services.image_filter import ImageFilter, validate_image_statuses

logger = get_logger(__name__)


def _unique(ids: Iterable[int]) -> list[int]:
    """De-duplicate while keeping request order."""
    return list(dict.fromkeys(ids))


def match_image_ids(
    image_id_lists: Iterable[Iterable[int]], requested_count: int, must_match_all: bool
) -> set[int]:
    """
    Images matching a membership filter.

    Args:
        image_id_lists: One image id list per requested tag/label
        requested_count: Number of distinct tags/labels requested
        must_match_all: Keep only images present in every list (otherwise any)

    Returns:
        Matching image ids
    """
    match_counts: Counter[int] = Counter()
    for image_ids in image_id_lists:
        # An id counts once per list even if the list repeats it
        match_counts.update(set(image_ids))

    if must_match_all:
        return {image_id for image_id, count in match_counts.items() if count == requested_count}
    return set(match_counts)


async def resolve_image_tag_filter(
    lookup: ImageTagLookup, image_tag_ids: list[int], must_match_all: bool
) -> set[int]:
    """Images holding any (or all) of `image_tag_ids`."""
    image_tag_ids = _unique(image_tag_ids)
    image_id_lists = await lookup.get_image_ids_of_image_tags(image_tag_ids)
    return match_image_ids(image_id_lists, len(image_tag_ids), must_match_all)


async def resolve_region_label_filter(
    lookup: RegionLookup, region_label_ids: list[int], must_match_all: bool
) -> set[int]:
    """
    Images with a region carrying any (or all) of `region_label_ids`.

    A label drawn on several regions of one image still counts once for
    that image; match_image_ids() de-duplicates within each label's list.
    """
    region_label_ids = _unique(region_label_ids)
    image_id_lists = await lookup.get_image_ids_of_region_labels(region_label_ids)
    return match_image_ids(image_id_lists, len(region_label_ids), must_match_all)


async def resolve_bookmark_filter(lookup: BookmarkLookup, user_ids: list[int]) -> set[int]:
    """Images bookmarked by any of `user_ids` (union across users)."""
    return set(await lookup.get_bookmarked_image_ids(_unique(user_ids)))


def intersect_image_id_sets(
    image_id_sets: Iterable[set[int]], initial: set[int] | None = None
) -> set[int] | None:
    """
    Intersect resolved image id sets.

    The first set (or `initial`, when given) seeds the result and every
    following set narrows it. Returns None when there is nothing to
    intersect, which means "no restriction" and is different from an
    empty set.
    """
    sets = list(image_id_sets)
    if initial is not None:
        sets.insert(0, initial)
    if not sets:
        return None
    return reduce(lambda running, image_ids: running & image_ids, sets[1:], set(sets[0]))


class ImageFilterNormalizer:
    """
    Turns boundary filter options into a normalized ImageFilter.

    Lookups are passed in explicitly so the normalizer can run against the
    database or against in-memory fakes.
    """

    def __init__(
        self,
        image_tag_lookup: ImageTagLookup,
        region_lookup: RegionLookup,
        bookmark_lookup: BookmarkLookup,
        max_id_list_length: int | None = None,
    ) -> None:
        self.image_tag_lookup = image_tag_lookup
        self.region_lookup = region_lookup
        self.bookmark_lookup = bookmark_lookup
        self.max_id_list_length = (
            max_id_list_length
            if max_id_list_length is not None
            else settings.MAX_FILTER_ID_LIST_LENGTH
        )

    async def normalize(self, options: ImageListFilterOptions | None) -> ImageFilter:
        """
        Normalize `options`, resolving cross-entity dimensions into image ids.

        Validation happens before any lookup is issued.

        Raises:
            InvalidArgumentError: On an unknown image status or an oversized id list
        """
        if options is None:
            return ImageFilter()

        self._validate(options)

        image_filter = ImageFilter(
            image_type_ids=[
                None if image_type_id == NO_IMAGE_TYPE_ID else image_type_id
                for image_type_id in options.image_type_ids
            ],
            uploaded_by_user_ids=list(options.uploaded_by_user_ids),
            not_uploaded_by_user_ids=list(options.not_uploaded_by_user_ids),
            published_by_user_ids=list(options.published_by_user_ids),
            verified_by_user_ids=list(options.verified_by_user_ids),
            upload_time_start=options.upload_time_start,
            upload_time_end=options.upload_time_end,
            publish_time_start=options.publish_time_start,
            publish_time_end=options.publish_time_end,
            verify_time_start=options.verify_time_start,
            verify_time_end=options.verify_time_end,
            original_file_name_query=options.original_file_name_query,
            image_statuses=list(options.image_statuses),
            must_have_description=options.must_have_description,
        )

        initial = set(options.image_ids) if options.image_ids is not None else None
        image_filter.image_ids = await self._resolve_image_id_sets(options, initial)
        return image_filter

    def _validate(self, options: ImageListFilterOptions) -> None:
        validate_image_statuses(options.image_statuses)

        id_lists = {
            "image_ids": options.image_ids or [],
            "image_type_ids": options.image_type_ids,
            "uploaded_by_user_ids": options.uploaded_by_user_ids,
            "not_uploaded_by_user_ids": options.not_uploaded_by_user_ids,
            "published_by_user_ids": options.published_by_user_ids,
            "verified_by_user_ids": options.verified_by_user_ids,
            "image_tag_ids": options.image_tag_ids,
            "region_label_ids": options.region_label_ids,
            "bookmarked_by_user_ids": options.bookmarked_by_user_ids,
        }
        for dimension, ids in id_lists.items():
            if len(ids) > self.max_id_list_length:
                raise InvalidArgumentError(
                    f"too many values for {dimension}: {len(ids)} > {self.max_id_list_length}",
                    dimension=dimension,
                    count=len(ids),
                    limit=self.max_id_list_length,
                )

    async def _resolve_image_id_sets(
        self, options: ImageListFilterOptions, initial: set[int] | None
    ) -> set[int] | None:
        resolvers: list[tuple[str, Callable[[], Awaitable[set[int]]]]] = []
        if options.image_tag_ids:
            resolvers.append(
                (
                    "image_tag_ids",
                    lambda: resolve_image_tag_filter(
                        self.image_tag_lookup,
                        options.image_tag_ids,
                        options.must_match_all_image_tags,
                    ),
                )
            )
        if options.region_label_ids:
            resolvers.append(
                (
                    "region_label_ids",
                    lambda: resolve_region_label_filter(
                        self.region_lookup,
                        options.region_label_ids,
                        options.must_match_all_region_labels,
                    ),
                )
            )
        if options.bookmarked_by_user_ids:
            resolvers.append(
                (
                    "bookmarked_by_user_ids",
                    lambda: resolve_bookmark_filter(
                        self.bookmark_lookup, options.bookmarked_by_user_ids
                    ),
                )
            )

        running = initial
        for dimension, resolve in resolvers:
            if running is not None and not running:
                # Already empty; further dimensions cannot widen it
                logger.debug("image_filter_resolution_short_circuited", dimension=dimension)
                break
            image_ids = await resolve()
            running = intersect_image_id_sets([image_ids], initial=running)
            logger.debug(
                "image_filter_dimension_resolved",
                dimension=dimension,
                matched_count=len(image_ids),
                remaining_count=len(running) if running is not None else None,
            )
        return running
