"""
Image list queries.

Read-only data access for image listings: fetch one image, count images
matching a filter, and list a sorted offset/limit window of images or image
ids. Every query takes an optional extra condition, which is how the
position queries in app/services/image_list.py restrict a listing to the
rows strictly after (or before) a given image.

The image type is LEFT OUTER JOINed on its primary key, so the join is
to-one and never changes the number of rows.

Store failures are logged and re-raised as InternalError; nothing here
retries.
"""

from typing import Any

from sqlalchemy import ColumnElement, Select, and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InternalError
from app.core.logging import get_logger
from app.models.image import Images
from app.models.image_type import ImageTypes
from app.services.image_filter import ImageFilter, image_filter_clause
from app.services.image_sort import ImageListSortOrder
from app.services.records import ImageRecord, image_record_from_row

logger = get_logger(__name__)


def _where_clause(
    image_filter: ImageFilter, extra_condition: ColumnElement[bool] | None
) -> ColumnElement[bool]:
    clause = image_filter_clause(image_filter)
    if extra_condition is not None:
        clause = and_(clause, extra_condition)
    return clause


def _apply_window(query: Select[Any], offset: int, limit: int | None) -> Select[Any]:
    query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query


async def get_image(db: AsyncSession, image_id: int) -> ImageRecord | None:
    """
    Get a single image (with its type) by ID.

    Returns:
        The image, or None if no image has this id
    """
    try:
        result = await db.execute(
            select(Images, ImageTypes)
            .outerjoin(ImageTypes, Images.image_type_id == ImageTypes.image_type_id)  # type: ignore[arg-type]
            .where(Images.image_id == image_id)  # type: ignore[arg-type]
        )
        rows = result.all()
    except SQLAlchemyError as error:
        logger.error("image_query_failed", image_id=image_id, error=str(error))
        raise InternalError("failed to get image", image_id=image_id) from error

    if not rows:
        logger.debug("image_not_found", image_id=image_id)
        return None
    if len(rows) > 1:
        logger.error("image_query_returned_multiple_rows", image_id=image_id, row_count=len(rows))
        raise InternalError("more than one image was found", image_id=image_id)

    image, image_type = rows[0]
    return image_record_from_row(image, image_type)


async def count_images(
    db: AsyncSession,
    image_filter: ImageFilter,
    extra_condition: ColumnElement[bool] | None = None,
) -> int:
    """Number of images matching `image_filter` (and `extra_condition`, if given)."""
    where_clause = _where_clause(image_filter, extra_condition)
    try:
        result = await db.execute(select(func.count()).select_from(Images).where(where_clause))
        count = result.scalar_one()
    except SQLAlchemyError as error:
        logger.error("image_count_query_failed", image_filter=repr(image_filter), error=str(error))
        raise InternalError("failed to get image count") from error
    return int(count)


async def list_images(
    db: AsyncSession,
    offset: int,
    limit: int | None,
    sort_order: ImageListSortOrder,
    image_filter: ImageFilter,
    extra_condition: ColumnElement[bool] | None = None,
) -> list[ImageRecord]:
    """
    Sorted window of images matching `image_filter`.

    Args:
        offset: Rows to skip from the start of the sorted list
        limit: Maximum rows to return (None means unbounded)
        sort_order: Order to sort by
        image_filter: Normalized filter
        extra_condition: Additional WHERE condition

    Returns:
        Images in sort order (empty list when nothing matches)
    """
    order_by = sort_order.get_order_by()
    where_clause = _where_clause(image_filter, extra_condition)
    query = _apply_window(
        select(Images, ImageTypes)
        .outerjoin(ImageTypes, Images.image_type_id == ImageTypes.image_type_id)  # type: ignore[arg-type]
        .where(where_clause)
        .order_by(*order_by),
        offset,
        limit,
    )
    try:
        result = await db.execute(query)
        rows = result.all()
    except SQLAlchemyError as error:
        logger.error(
            "image_list_query_failed",
            offset=offset,
            limit=limit,
            sort_order=sort_order.name,
            image_filter=repr(image_filter),
            error=str(error),
        )
        raise InternalError(
            "failed to get image list", offset=offset, limit=limit, sort_order=int(sort_order)
        ) from error
    return [image_record_from_row(image, image_type) for image, image_type in rows]


async def list_image_ids(
    db: AsyncSession,
    offset: int,
    limit: int | None,
    sort_order: ImageListSortOrder,
    image_filter: ImageFilter,
    extra_condition: ColumnElement[bool] | None = None,
) -> list[int]:
    """Same as list_images() but selects image ids only."""
    order_by = sort_order.get_order_by()
    where_clause = _where_clause(image_filter, extra_condition)
    query = _apply_window(
        select(Images.image_id).where(where_clause).order_by(*order_by),  # type: ignore[call-overload]
        offset,
        limit,
    )
    try:
        result = await db.execute(query)
        image_ids = result.scalars().all()
    except SQLAlchemyError as error:
        logger.error(
            "image_id_list_query_failed",
            offset=offset,
            limit=limit,
            sort_order=sort_order.name,
            image_filter=repr(image_filter),
            error=str(error),
        )
        raise InternalError(
            "failed to get image id list", offset=offset, limit=limit, sort_order=int(sort_order)
        ) from error
    return [int(image_id) for image_id in image_ids]
