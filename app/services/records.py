"""
Typed records returned by the catalog query layer.

Store rows are mapped into these field by field, so a renamed or missing
column fails loudly at the mapping site instead of leaking through as a
silently missing key.
"""

from dataclasses import dataclass, field
from typing import Any

from app.models.image import Images
from app.models.image_tag import ImageTags
from app.models.image_type import ImageTypes
from app.models.region import RegionLabels, Regions


@dataclass(slots=True, frozen=True)
class ImageTypeRecord:
    image_type_id: int
    display_name: str
    has_predictive_model: bool


@dataclass(slots=True, frozen=True)
class ImageRecord:
    image_id: int
    uploaded_by_user_id: int
    upload_time: int
    published_by_user_id: int
    publish_time: int
    verified_by_user_id: int
    verify_time: int
    original_file_name: str
    original_image_filename: str
    thumbnail_image_filename: str
    description: str
    image_type: ImageTypeRecord | None
    status: int


@dataclass(slots=True, frozen=True)
class ImageTagRecord:
    image_tag_id: int
    of_image_tag_group_id: int
    display_name: str


@dataclass(slots=True, frozen=True)
class RegionLabelRecord:
    region_label_id: int
    of_image_type_id: int
    display_name: str
    color: str


@dataclass(slots=True, frozen=True)
class RegionRecord:
    region_id: int
    of_image_id: int
    drawn_by_user_id: int
    labeled_by_user_id: int
    border: list[dict[str, Any]]
    holes: list[list[dict[str, Any]]]
    label: RegionLabelRecord | None


@dataclass(slots=True)
class ImageListResult:
    total_count: int
    images: list[ImageRecord]
    image_tags: list[list[ImageTagRecord]] | None = None
    regions: list[list[RegionRecord]] | None = None


@dataclass(slots=True)
class ImageIdListResult:
    total_count: int
    image_ids: list[int] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ImagePosition:
    position: int
    total_count: int
    prev_image_id: int | None
    next_image_id: int | None


def image_type_record_from_row(image_type: ImageTypes) -> ImageTypeRecord:
    assert image_type.image_type_id is not None
    return ImageTypeRecord(
        image_type_id=int(image_type.image_type_id),
        display_name=image_type.display_name,
        has_predictive_model=bool(image_type.has_predictive_model),
    )


def image_record_from_row(image: Images, image_type: ImageTypes | None) -> ImageRecord:
    """Map an image row (and its LEFT JOINed type row, if any) to an ImageRecord."""
    assert image.image_id is not None
    return ImageRecord(
        image_id=int(image.image_id),
        uploaded_by_user_id=int(image.uploaded_by_user_id),
        upload_time=int(image.upload_time),
        published_by_user_id=int(image.published_by_user_id),
        publish_time=int(image.publish_time),
        verified_by_user_id=int(image.verified_by_user_id),
        verify_time=int(image.verify_time),
        original_file_name=image.original_file_name,
        original_image_filename=image.original_image_filename,
        thumbnail_image_filename=image.thumbnail_image_filename,
        description=image.description,
        image_type=image_type_record_from_row(image_type) if image_type is not None else None,
        status=int(image.status),
    )


def image_tag_record_from_row(image_tag: ImageTags) -> ImageTagRecord:
    assert image_tag.image_tag_id is not None
    return ImageTagRecord(
        image_tag_id=int(image_tag.image_tag_id),
        of_image_tag_group_id=int(image_tag.of_image_tag_group_id),
        display_name=image_tag.display_name,
    )


def region_record_from_row(region: Regions, label: RegionLabels | None) -> RegionRecord:
    """Map a region row (and its LEFT JOINed label row, if any) to a RegionRecord."""
    assert region.region_id is not None
    label_record = None
    if label is not None:
        assert label.region_label_id is not None
        label_record = RegionLabelRecord(
            region_label_id=int(label.region_label_id),
            of_image_type_id=int(label.of_image_type_id),
            display_name=label.display_name,
            color=label.color,
        )
    return RegionRecord(
        region_id=int(region.region_id),
        of_image_id=int(region.of_image_id),
        drawn_by_user_id=int(region.drawn_by_user_id),
        labeled_by_user_id=int(region.labeled_by_user_id),
        border=list(region.border or []),
        holes=list(region.holes or []),
        label=label_record,
    )
