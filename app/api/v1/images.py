"""
Images API endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.api.dependencies import (
    ImageListSortParams,
    OffsetPaginationParams,
    get_image_list_filter_options,
    get_image_list_service,
)
from app.schemas.image import (
    ImageIdListResponse,
    ImageListFilterOptions,
    ImageListResponse,
    ImagePositionResponse,
    ImageResponse,
)
from app.services.image_list import ImageListService

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/", response_model=ImageListResponse, include_in_schema=False)
@router.get("", response_model=ImageListResponse)
async def list_images(
    pagination: Annotated[OffsetPaginationParams, Depends()],
    sorting: Annotated[ImageListSortParams, Depends()],
    filter_options: Annotated[ImageListFilterOptions, Depends(get_image_list_filter_options)],
    with_image_tag: Annotated[
        bool, Query(description="Include the tags of every returned image")
    ] = False,
    with_region: Annotated[
        bool, Query(description="Include the regions of every returned image")
    ] = False,
    service: ImageListService = Depends(get_image_list_service),
) -> ImageListResponse:
    """
    List images with filtering, sorting and offset pagination.

    **Examples:**
    - `/images?sort_order=2&limit=20` - First 20 images by upload time, oldest first
    - `/images?image_type_ids=0&image_type_ids=3` - Images with no type or type 3
    - `/images?image_tag_ids=7&image_tag_ids=8&must_match_all_image_tags=true` - Images with tags 7 AND 8
    - `/images?bookmarked_by_user_ids=5&with_image_tag=true` - Images bookmarked by user 5, with tags
    """
    result = await service.get_image_list(
        pagination.offset,
        pagination.limit,
        sorting.sort_order,
        filter_options,
        with_image_tag=with_image_tag,
        with_region=with_region,
    )
    return ImageListResponse.from_result(result)


@router.get("/ids", response_model=ImageIdListResponse)
async def list_image_ids(
    pagination: Annotated[OffsetPaginationParams, Depends()],
    sorting: Annotated[ImageListSortParams, Depends()],
    filter_options: Annotated[ImageListFilterOptions, Depends(get_image_list_filter_options)],
    service: ImageListService = Depends(get_image_list_service),
) -> ImageIdListResponse:
    """List the ids of images matching the filter, in sort order."""
    result = await service.get_image_id_list(
        pagination.offset, pagination.limit, sorting.sort_order, filter_options
    )
    return ImageIdListResponse.from_result(result)


@router.get("/{image_id}/position", response_model=ImagePositionResponse)
async def get_image_position_in_list(
    image_id: Annotated[int, Path(description="Image ID")],
    sorting: Annotated[ImageListSortParams, Depends()],
    filter_options: Annotated[ImageListFilterOptions, Depends(get_image_list_filter_options)],
    service: ImageListService = Depends(get_image_list_service),
) -> ImagePositionResponse:
    """
    1-based position of an image in the filtered, sorted list, the total
    count, and the ids of its previous and next images (absent at the ends).
    """
    result = await service.get_image_position_in_list(
        image_id, sorting.sort_order, filter_options
    )
    return ImagePositionResponse.from_result(result)


@router.get("/{image_id}", response_model=ImageResponse)
async def get_image(
    image_id: Annotated[int, Path(description="Image ID")],
    service: ImageListService = Depends(get_image_list_service),
) -> ImageResponse:
    """Get a single image by ID."""
    image = await service.get_image(image_id)
    return ImageResponse.from_record(image)
