"""
Tests for image list sort orders.

These cover the sort order table, ORDER BY construction, the after-image
condition used for position queries, and wire value parsing.
"""

import pytest
from sqlalchemy.dialects import sqlite

from app.core.errors import InvalidArgumentError
from app.services.image_sort import (
    DEFAULT_SORT_ORDER,
    ImageListSortOrder,
    parse_sort_order,
)
from app.services.records import ImageRecord


def _sql(clause) -> str:
    return str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


def _image(image_id: int = 3, upload_time: int = 20) -> ImageRecord:
    return ImageRecord(
        image_id=image_id,
        uploaded_by_user_id=1,
        upload_time=upload_time,
        published_by_user_id=0,
        publish_time=0,
        verified_by_user_id=0,
        verify_time=0,
        original_file_name="a.png",
        original_image_filename="a-original.png",
        thumbnail_image_filename="a-thumbnail.jpeg",
        description="",
        image_type=None,
        status=0,
    )


@pytest.mark.unit
class TestSortOrderTable:
    """Tests for the properties every sort order carries."""

    @pytest.mark.parametrize("order", list(ImageListSortOrder))
    def test_opposite_is_an_involution(self, order):
        assert order.opposite().opposite() is order

    @pytest.mark.parametrize("order", list(ImageListSortOrder))
    def test_opposite_keeps_key_and_flips_direction(self, order):
        opposite = order.opposite()
        assert opposite is not order
        assert opposite.key_column_name == order.key_column_name
        assert opposite.is_ascending != order.is_ascending

    def test_wire_values(self):
        assert [order.value for order in ImageListSortOrder] == list(range(8))
        assert ImageListSortOrder(2) is ImageListSortOrder.UPLOAD_TIME_ASCENDING

    def test_id_orders_have_no_key_column(self):
        assert ImageListSortOrder.ID_ASCENDING.key_column_name is None
        assert ImageListSortOrder.ID_DESCENDING.key_column_name is None
        assert ImageListSortOrder.VERIFY_TIME_ASCENDING.key_column_name == "verify_time"


@pytest.mark.unit
class TestGetOrderBy:
    """Tests for ORDER BY construction."""

    def test_keyed_order_breaks_ties_on_image_id(self):
        clauses = ImageListSortOrder.UPLOAD_TIME_DESCENDING.get_order_by()

        assert [_sql(clause) for clause in clauses] == [
            "images.upload_time DESC",
            "images.image_id DESC",
        ]

    def test_ascending_keyed_order(self):
        clauses = ImageListSortOrder.PUBLISH_TIME_ASCENDING.get_order_by()

        assert [_sql(clause) for clause in clauses] == [
            "images.publish_time ASC",
            "images.image_id ASC",
        ]

    def test_id_order_is_a_single_clause(self):
        clauses = ImageListSortOrder.ID_DESCENDING.get_order_by()

        assert [_sql(clause) for clause in clauses] == ["images.image_id DESC"]


@pytest.mark.unit
class TestAfterImageClause:
    """Tests for the strict 'comes after this image' condition."""

    def test_ascending_keyed_order(self):
        sql = _sql(ImageListSortOrder.UPLOAD_TIME_ASCENDING.after_image_clause(_image()))

        assert "images.upload_time > 20" in sql
        assert "images.upload_time = 20" in sql
        assert "images.image_id > 3" in sql
        assert " OR " in sql

    def test_descending_keyed_order_flips_comparisons(self):
        sql = _sql(ImageListSortOrder.UPLOAD_TIME_DESCENDING.after_image_clause(_image()))

        assert "images.upload_time < 20" in sql
        assert "images.image_id < 3" in sql

    def test_id_orders(self):
        image = _image(image_id=7)

        assert _sql(ImageListSortOrder.ID_ASCENDING.after_image_clause(image)) == "images.image_id > 7"
        assert _sql(ImageListSortOrder.ID_DESCENDING.after_image_clause(image)) == "images.image_id < 7"


@pytest.mark.unit
class TestParseSortOrder:
    """Tests for wire value parsing."""

    def test_none_uses_default(self):
        assert parse_sort_order(None) is DEFAULT_SORT_ORDER
        assert DEFAULT_SORT_ORDER is ImageListSortOrder.UPLOAD_TIME_DESCENDING

    @pytest.mark.parametrize("value", [0, 3, 7])
    def test_known_values(self, value):
        assert parse_sort_order(value) == value

    @pytest.mark.parametrize("value", [-1, 8, 99])
    def test_unknown_value_is_invalid_argument(self, value):
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_sort_order(value)

        assert exc_info.value.status_code == 400
        assert exc_info.value.context == {"sort_order": value}
