"""
Image list sort orders.

Each of the 8 sort orders is one row in a lookup table: the key column it
sorts by, its direction, and its opposite (same key, flipped direction).
Everything that orders, pages through, or walks neighbors of an image list
goes through this module, so the (key, image_id) tie-break is defined once.

Keyed orders always use (key, image_id) as a composite key: upload/publish/
verify times collide often, and a single-column ORDER BY is not a total
order. The ID orders are already total.
"""

from enum import IntEnum
from typing import Any, NamedTuple

from sqlalchemy import ColumnElement, and_, asc, desc, or_
from sqlalchemy.sql.elements import UnaryExpression

from app.core.errors import InvalidArgumentError
from app.models.image import Images
from app.services.records import ImageRecord


class ImageListSortOrder(IntEnum):
    """Sort orders accepted by image listing and position queries (wire values)."""

    ID_ASCENDING = 0
    ID_DESCENDING = 1
    UPLOAD_TIME_ASCENDING = 2
    UPLOAD_TIME_DESCENDING = 3
    PUBLISH_TIME_ASCENDING = 4
    PUBLISH_TIME_DESCENDING = 5
    VERIFY_TIME_ASCENDING = 6
    VERIFY_TIME_DESCENDING = 7

    @property
    def key_column_name(self) -> str | None:
        """Name of the primary sort column, or None for the ID orders."""
        return _SORT_ORDER_TABLE[self].key_column_name

    @property
    def is_ascending(self) -> bool:
        return _SORT_ORDER_TABLE[self].ascending

    def opposite(self) -> "ImageListSortOrder":
        """Same key, reversed direction."""
        return _SORT_ORDER_TABLE[self].opposite

    def get_order_by(self) -> list[UnaryExpression[Any]]:
        """
        ORDER BY clauses for this order.

        Example:
            ImageListSortOrder.UPLOAD_TIME_DESCENDING.get_order_by()
            # -> [desc(Images.upload_time), desc(Images.image_id)]
        """
        direction = asc if self.is_ascending else desc
        clauses = []
        if self.key_column_name is not None:
            clauses.append(direction(getattr(Images, self.key_column_name)))
        clauses.append(direction(Images.image_id))  # type: ignore[arg-type]
        return clauses

    def after_image_clause(self, image: ImageRecord) -> ColumnElement[bool]:
        """
        Rows that come strictly after `image` under this order.

        For an ascending keyed order this is
        ``key > image.key OR (key = image.key AND image_id > image.image_id)``;
        descending flips both comparisons. Rows strictly *before* `image` are
        the rows after it under opposite().
        """
        image_id_column: Any = Images.image_id
        if self.key_column_name is None:
            if self.is_ascending:
                return image_id_column > image.image_id
            return image_id_column < image.image_id

        key_column: Any = getattr(Images, self.key_column_name)
        key_value = getattr(image, self.key_column_name)
        if self.is_ascending:
            return or_(
                key_column > key_value,
                and_(key_column == key_value, image_id_column > image.image_id),
            )
        return or_(
            key_column < key_value,
            and_(key_column == key_value, image_id_column < image.image_id),
        )


class _SortOrderEntry(NamedTuple):
    key_column_name: str | None
    ascending: bool
    opposite: ImageListSortOrder


_SORT_ORDER_TABLE: dict[ImageListSortOrder, _SortOrderEntry] = {
    ImageListSortOrder.ID_ASCENDING: _SortOrderEntry(
        None, True, ImageListSortOrder.ID_DESCENDING
    ),
    ImageListSortOrder.ID_DESCENDING: _SortOrderEntry(
        None, False, ImageListSortOrder.ID_ASCENDING
    ),
    ImageListSortOrder.UPLOAD_TIME_ASCENDING: _SortOrderEntry(
        "upload_time", True, ImageListSortOrder.UPLOAD_TIME_DESCENDING
    ),
    ImageListSortOrder.UPLOAD_TIME_DESCENDING: _SortOrderEntry(
        "upload_time", False, ImageListSortOrder.UPLOAD_TIME_ASCENDING
    ),
    ImageListSortOrder.PUBLISH_TIME_ASCENDING: _SortOrderEntry(
        "publish_time", True, ImageListSortOrder.PUBLISH_TIME_DESCENDING
    ),
    ImageListSortOrder.PUBLISH_TIME_DESCENDING: _SortOrderEntry(
        "publish_time", False, ImageListSortOrder.PUBLISH_TIME_ASCENDING
    ),
    ImageListSortOrder.VERIFY_TIME_ASCENDING: _SortOrderEntry(
        "verify_time", True, ImageListSortOrder.VERIFY_TIME_DESCENDING
    ),
    ImageListSortOrder.VERIFY_TIME_DESCENDING: _SortOrderEntry(
        "verify_time", False, ImageListSortOrder.VERIFY_TIME_ASCENDING
    ),
}

DEFAULT_SORT_ORDER = ImageListSortOrder.UPLOAD_TIME_DESCENDING


def parse_sort_order(value: int | None) -> ImageListSortOrder:
    """
    Convert a wire value to an ImageListSortOrder.

    An unspecified order (None) falls back to UPLOAD_TIME_DESCENDING.

    Raises:
        InvalidArgumentError: If value is not one of the 8 known orders
    """
    if value is None:
        return DEFAULT_SORT_ORDER
    try:
        return ImageListSortOrder(value)
    except ValueError as error:
        raise InvalidArgumentError(
            f"invalid sort_order value {value}", sort_order=value
        ) from error
