"""
Tests for image list queries against the test database.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import ImageStatus
from app.services import image_query
from app.services.image_filter import ImageFilter
from app.services.image_sort import ImageListSortOrder


@pytest.fixture
async def status_images(create_image):
    """
    Images at every stage of review.

    Image 5 was published by user 7 and then excluded, so its publisher and
    publish time are still set but it must not count as published.
    """
    await create_image(image_id=1, status=ImageStatus.UPLOADED)
    await create_image(
        image_id=2, status=ImageStatus.PUBLISHED, published_by_user_id=7, publish_time=100
    )
    await create_image(
        image_id=3,
        status=ImageStatus.VERIFIED,
        published_by_user_id=7,
        publish_time=100,
        verified_by_user_id=8,
        verify_time=200,
    )
    await create_image(
        image_id=4, status=ImageStatus.PUBLISHED, published_by_user_id=9, publish_time=50
    )
    await create_image(
        image_id=5, status=ImageStatus.EXCLUDED, published_by_user_id=7, publish_time=150
    )


async def _ids(db: AsyncSession, image_filter: ImageFilter, order=ImageListSortOrder.ID_ASCENDING):
    return await image_query.list_image_ids(db, 0, None, order, image_filter)


class TestGetImage:
    """Tests for image_query.get_image()."""

    async def test_returns_image_with_type(self, db_session, create_image, create_image_type):
        await create_image_type(3, display_name="chest x-ray", has_predictive_model=True)
        await create_image(image_id=12, image_type_id=3, original_file_name="scan.png")

        image = await image_query.get_image(db_session, 12)

        assert image is not None
        assert image.image_id == 12
        assert image.original_file_name == "scan.png"
        assert image.image_type is not None
        assert image.image_type.display_name == "chest x-ray"
        assert image.image_type.has_predictive_model is True

    async def test_image_without_type(self, db_session, create_image):
        await create_image(image_id=1)

        image = await image_query.get_image(db_session, 1)

        assert image is not None
        assert image.image_type is None

    async def test_missing_image(self, db_session):
        assert await image_query.get_image(db_session, 404) is None


class TestListImages:
    """Tests for sorting and paging of image listings."""

    async def test_upload_time_ascending_breaks_ties_on_id(self, db_session, upload_time_images):
        ids = await _ids(db_session, ImageFilter(), ImageListSortOrder.UPLOAD_TIME_ASCENDING)

        assert ids == [1, 2, 3, 4, 5]

    async def test_upload_time_descending_breaks_ties_on_id(self, db_session, upload_time_images):
        ids = await _ids(db_session, ImageFilter(), ImageListSortOrder.UPLOAD_TIME_DESCENDING)

        assert ids == [5, 4, 3, 2, 1]

    async def test_offset_and_limit(self, db_session, upload_time_images):
        order = ImageListSortOrder.UPLOAD_TIME_ASCENDING

        images = await image_query.list_images(db_session, 1, 2, order, ImageFilter())

        assert [image.image_id for image in images] == [2, 3]

    async def test_offset_past_the_end(self, db_session, upload_time_images):
        ids = await image_query.list_image_ids(
            db_session, 10, 5, ImageListSortOrder.ID_ASCENDING, ImageFilter()
        )

        assert ids == []

    async def test_pages_cover_the_list_exactly_once(self, db_session, upload_time_images):
        order = ImageListSortOrder.UPLOAD_TIME_DESCENDING
        full = await _ids(db_session, ImageFilter(), order)

        paged = []
        for offset in range(0, 5, 2):
            paged.extend(
                await image_query.list_image_ids(db_session, offset, 2, order, ImageFilter())
            )

        assert paged == full

    async def test_repeated_listing_is_identical(self, db_session, upload_time_images):
        order = ImageListSortOrder.UPLOAD_TIME_ASCENDING

        first = await image_query.list_image_ids(db_session, 1, 3, order, ImageFilter())
        second = await image_query.list_image_ids(db_session, 1, 3, order, ImageFilter())

        assert first == second

    async def test_count_agrees_with_unbounded_listing(self, db_session, upload_time_images):
        image_filter = ImageFilter(upload_time_start=20, upload_time_end=30)

        count = await image_query.count_images(db_session, image_filter)
        ids = await _ids(db_session, image_filter)

        assert count == len(ids) == 3
        assert ids == [2, 3, 4]


class TestImageFilters:
    """Tests for filter dimensions evaluated by the database."""

    async def test_image_type_filter_with_no_type_sentinel(
        self, db_session, create_image, create_image_type
    ):
        await create_image_type(3)
        await create_image_type(4)
        await create_image(image_id=1, image_type_id=None)
        await create_image(image_id=2, image_type_id=3)
        await create_image(image_id=3, image_type_id=4)

        ids = await _ids(db_session, ImageFilter(image_type_ids=[None, 3]))

        assert ids == [1, 2]

    async def test_uploader_filters(self, db_session, create_image):
        await create_image(image_id=1, uploaded_by_user_id=1)
        await create_image(image_id=2, uploaded_by_user_id=2)
        await create_image(image_id=3, uploaded_by_user_id=3)

        assert await _ids(db_session, ImageFilter(uploaded_by_user_ids=[1, 3])) == [1, 3]
        assert await _ids(db_session, ImageFilter(not_uploaded_by_user_ids=[1, 3])) == [2]

    async def test_publisher_filter_ignores_unpublished_images(self, db_session, status_images):
        assert await _ids(db_session, ImageFilter(published_by_user_ids=[7])) == [2, 3]

    async def test_verifier_filter(self, db_session, status_images):
        assert await _ids(db_session, ImageFilter(verified_by_user_ids=[8])) == [3]

    async def test_publish_time_range_ignores_unpublished_images(self, db_session, status_images):
        image_filter = ImageFilter(publish_time_start=100, publish_time_end=200)

        assert await _ids(db_session, image_filter) == [2, 3]

    async def test_verify_time_range(self, db_session, status_images):
        assert await _ids(db_session, ImageFilter(verify_time_start=1)) == [3]

    async def test_status_filter(self, db_session, status_images):
        image_filter = ImageFilter(image_statuses=[ImageStatus.UPLOADED, ImageStatus.EXCLUDED])

        assert await _ids(db_session, image_filter) == [1, 5]

    async def test_file_name_query_matches_wildcards_literally(self, db_session, create_image):
        await create_image(image_id=1, original_file_name="cat_1.png")
        await create_image(image_id=2, original_file_name="cat11.png")
        await create_image(image_id=3, original_file_name="dog.png")

        assert await _ids(db_session, ImageFilter(original_file_name_query="cat_1")) == [1]
        assert await _ids(db_session, ImageFilter(original_file_name_query="cat")) == [1, 2]

    async def test_file_name_query_is_case_sensitive(self, db_session, create_image):
        await create_image(image_id=1, original_file_name="Cat.png")
        await create_image(image_id=2, original_file_name="cat.png")
        await create_image(image_id=3, original_file_name="CAT.PNG")

        assert await _ids(db_session, ImageFilter(original_file_name_query="cat")) == [2]
        assert await _ids(db_session, ImageFilter(original_file_name_query="Cat")) == [1]
        assert await _ids(db_session, ImageFilter(original_file_name_query="CAT")) == [3]
        assert await image_query.count_images(
            db_session, ImageFilter(original_file_name_query="cat")
        ) == 1

    async def test_must_have_description(self, db_session, create_image):
        await create_image(image_id=1, description="")
        await create_image(image_id=2, description="left lung")

        assert await _ids(db_session, ImageFilter(must_have_description=True)) == [2]

    async def test_image_id_restriction(self, db_session, upload_time_images):
        assert await _ids(db_session, ImageFilter(image_ids={2, 4, 99})) == [2, 4]

    async def test_empty_image_id_restriction_matches_nothing(
        self, db_session, upload_time_images
    ):
        image_filter = ImageFilter(image_ids=set())

        assert await _ids(db_session, image_filter) == []
        assert await image_query.count_images(db_session, image_filter) == 0

    async def test_dimensions_are_and_ed(self, db_session, create_image):
        await create_image(image_id=1, uploaded_by_user_id=1, upload_time=10)
        await create_image(image_id=2, uploaded_by_user_id=1, upload_time=50)
        await create_image(image_id=3, uploaded_by_user_id=2, upload_time=10)

        image_filter = ImageFilter(uploaded_by_user_ids=[1], upload_time_end=20)

        assert await _ids(db_session, image_filter) == [1]
