"""
Common query parameter models and dependencies for API endpoints.

These are used with FastAPI's Depends() to provide reusable query
parameter sets and service wiring across routes.
"""

from typing import Annotated

from fastapi import Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.schemas.image import ImageListFilterOptions
from app.services.image_list import ImageListService


class OffsetPaginationParams(BaseModel):
    """Offset/limit pagination; an absent limit means "until the end of the list"."""

    offset: int = Field(default=0, ge=0, description="Rows to skip")
    limit: int | None = Field(
        default=None, ge=1, le=settings.MAX_PAGE_SIZE, description="Maximum rows to return"
    )


class ImageListSortParams(BaseModel):
    """Sort order for image list queries (wire value, validated by the service)."""

    sort_order: int | None = Field(
        default=None,
        description=(
            "0=ID asc, 1=ID desc, 2=upload time asc, 3=upload time desc, "
            "4=publish time asc, 5=publish time desc, 6=verify time asc, 7=verify time desc "
            "(default 3)"
        ),
    )


def get_image_list_filter_options(
    image_ids: Annotated[list[int] | None, Query(description="Restrict to these image IDs")] = None,
    image_type_ids: Annotated[
        list[int] | None, Query(description="Image type IDs (0 = image has no type)")
    ] = None,
    uploaded_by_user_ids: Annotated[list[int] | None, Query(description="Uploader user IDs")] = None,
    not_uploaded_by_user_ids: Annotated[
        list[int] | None, Query(description="Exclude images uploaded by these user IDs")
    ] = None,
    upload_time_start: Annotated[int, Query(ge=0, description="0 = unbounded")] = 0,
    upload_time_end: Annotated[int, Query(ge=0, description="0 = unbounded")] = 0,
    published_by_user_ids: Annotated[list[int] | None, Query(description="Publisher user IDs")] = None,
    publish_time_start: Annotated[int, Query(ge=0, description="0 = unbounded")] = 0,
    publish_time_end: Annotated[int, Query(ge=0, description="0 = unbounded")] = 0,
    verified_by_user_ids: Annotated[list[int] | None, Query(description="Verifier user IDs")] = None,
    verify_time_start: Annotated[int, Query(ge=0, description="0 = unbounded")] = 0,
    verify_time_end: Annotated[int, Query(ge=0, description="0 = unbounded")] = 0,
    original_file_name_query: Annotated[
        str, Query(description="Substring of the original file name")
    ] = "",
    image_statuses: Annotated[
        list[int] | None,
        Query(description="0=Uploaded, 1=Published, 2=Verified, 3=Excluded"),
    ] = None,
    must_have_description: Annotated[bool, Query()] = False,
    image_tag_ids: Annotated[list[int] | None, Query(description="Image tag IDs")] = None,
    must_match_all_image_tags: Annotated[
        bool, Query(description="Match ALL tags instead of ANY")
    ] = False,
    region_label_ids: Annotated[list[int] | None, Query(description="Region label IDs")] = None,
    must_match_all_region_labels: Annotated[
        bool, Query(description="Match ALL region labels instead of ANY")
    ] = False,
    bookmarked_by_user_ids: Annotated[
        list[int] | None, Query(description="Images bookmarked by any of these user IDs")
    ] = None,
) -> ImageListFilterOptions:
    """
    Collect filter query parameters into ImageListFilterOptions.

    List parameters are repeated query parameters, e.g.
    `?image_tag_ids=7&image_tag_ids=8&must_match_all_image_tags=true`.
    """
    return ImageListFilterOptions(
        image_ids=image_ids,
        image_type_ids=image_type_ids or [],
        uploaded_by_user_ids=uploaded_by_user_ids or [],
        not_uploaded_by_user_ids=not_uploaded_by_user_ids or [],
        upload_time_start=upload_time_start,
        upload_time_end=upload_time_end,
        published_by_user_ids=published_by_user_ids or [],
        publish_time_start=publish_time_start,
        publish_time_end=publish_time_end,
        verified_by_user_ids=verified_by_user_ids or [],
        verify_time_start=verify_time_start,
        verify_time_end=verify_time_end,
        original_file_name_query=original_file_name_query,
        image_statuses=image_statuses or [],
        must_have_description=must_have_description,
        image_tag_ids=image_tag_ids or [],
        must_match_all_image_tags=must_match_all_image_tags,
        region_label_ids=region_label_ids or [],
        must_match_all_region_labels=must_match_all_region_labels,
        bookmarked_by_user_ids=bookmarked_by_user_ids or [],
    )


def get_image_list_service(db: AsyncSession = Depends(get_db)) -> ImageListService:
    """Wire an ImageListService with database-backed lookups for this request."""
    return ImageListService.from_session(db)
