"""
Pydantic schemas for Image endpoints
"""

from typing import Any

from pydantic import BaseModel, Field, computed_field

from app.config import settings
from app.services.records import (
    ImageIdListResult,
    ImageListResult,
    ImagePosition,
    ImageRecord,
    ImageTagRecord,
    RegionRecord,
)


class ImageListFilterOptions(BaseModel):
    """
    Filter fields accepted at the API boundary.

    Every field defaults to "no restriction": empty lists, 0 for time
    bounds and "" for the filename query. An image type id of 0 stands
    for "image has no type".
    """

    image_ids: list[int] | None = None
    image_type_ids: list[int] = Field(default_factory=list)
    uploaded_by_user_ids: list[int] = Field(default_factory=list)
    not_uploaded_by_user_ids: list[int] = Field(default_factory=list)
    upload_time_start: int = 0
    upload_time_end: int = 0
    published_by_user_ids: list[int] = Field(default_factory=list)
    publish_time_start: int = 0
    publish_time_end: int = 0
    verified_by_user_ids: list[int] = Field(default_factory=list)
    verify_time_start: int = 0
    verify_time_end: int = 0
    original_file_name_query: str = ""
    image_statuses: list[int] = Field(default_factory=list)
    must_have_description: bool = False
    image_tag_ids: list[int] = Field(default_factory=list)
    must_match_all_image_tags: bool = False
    region_label_ids: list[int] = Field(default_factory=list)
    must_match_all_region_labels: bool = False
    bookmarked_by_user_ids: list[int] = Field(default_factory=list)


class ImageTypeSummary(BaseModel):
    """Minimal image type info for embedding"""

    image_type_id: int
    display_name: str
    has_predictive_model: bool

    model_config = {"from_attributes": True}


class ImageResponse(BaseModel):
    """Schema for image response - what API returns."""

    image_id: int
    uploaded_by_user_id: int
    upload_time: int
    published_by_user_id: int
    publish_time: int
    verified_by_user_id: int
    verify_time: int
    original_file_name: str
    description: str
    image_type: ImageTypeSummary | None = None
    status: int

    # Stored file names, used to build URLs
    original_image_filename: str
    thumbnail_image_filename: str

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def image_url(self) -> str:
        """Generate original image URL"""
        return f"{settings.IMAGE_BASE_URL}/originals/{self.original_image_filename}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def thumbnail_url(self) -> str:
        """Generate thumbnail URL"""
        return f"{settings.IMAGE_BASE_URL}/thumbnails/{self.thumbnail_image_filename}"

    @classmethod
    def from_record(cls, image: ImageRecord) -> "ImageResponse":
        return cls.model_validate(image)


class ImageTagResponse(BaseModel):
    """Tag attached to an image"""

    image_tag_id: int
    of_image_tag_group_id: int
    display_name: str

    model_config = {"from_attributes": True}


class RegionLabelResponse(BaseModel):
    region_label_id: int
    of_image_type_id: int
    display_name: str
    color: str

    model_config = {"from_attributes": True}


class RegionResponse(BaseModel):
    """Region drawn on an image"""

    region_id: int
    drawn_by_user_id: int
    labeled_by_user_id: int
    border: list[dict[str, Any]]
    holes: list[list[dict[str, Any]]]
    label: RegionLabelResponse | None = None

    model_config = {"from_attributes": True}


class ImageListResponse(BaseModel):
    """
    Page of images.

    image_tags / regions are present only when requested and are aligned
    with images (entry i belongs to images[i]).
    """

    total_count: int
    images: list[ImageResponse]
    image_tags: list[list[ImageTagResponse]] | None = None
    regions: list[list[RegionResponse]] | None = None

    @classmethod
    def from_result(cls, result: ImageListResult) -> "ImageListResponse":
        return cls(
            total_count=result.total_count,
            images=[ImageResponse.from_record(image) for image in result.images],
            image_tags=_tag_lists(result.image_tags),
            regions=_region_lists(result.regions),
        )


class ImageIdListResponse(BaseModel):
    total_count: int
    image_ids: list[int]

    @classmethod
    def from_result(cls, result: ImageIdListResult) -> "ImageIdListResponse":
        return cls(total_count=result.total_count, image_ids=result.image_ids)


class ImagePositionResponse(BaseModel):
    """1-based rank of an image in a filtered, sorted list plus its neighbors"""

    position: int
    total_count: int
    prev_image_id: int | None = None
    next_image_id: int | None = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_result(cls, result: ImagePosition) -> "ImagePositionResponse":
        return cls.model_validate(result)


def _tag_lists(
    tag_lists: list[list[ImageTagRecord]] | None,
) -> list[list[ImageTagResponse]] | None:
    if tag_lists is None:
        return None
    return [[ImageTagResponse.model_validate(tag) for tag in tags] for tags in tag_lists]


def _region_lists(
    region_lists: list[list[RegionRecord]] | None,
) -> list[list[RegionResponse]] | None:
    if region_lists is None:
        return None
    return [
        [RegionResponse.model_validate(region) for region in regions] for regions in region_lists
    ]
