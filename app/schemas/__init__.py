"""
Pydantic schemas for API responses and requests
"""
from app.models.image import ImageBase  # Re-export from models
from app.schemas.image import (
    ImageIdListResponse,
    ImageListFilterOptions,
    ImageListResponse,
    ImagePositionResponse,
    ImageResponse,
    ImageTagResponse,
    ImageTypeSummary,
    RegionLabelResponse,
    RegionResponse,
)

__all__ = [
    "ImageBase",
    "ImageIdListResponse",
    "ImageListFilterOptions",
    "ImageListResponse",
    "ImagePositionResponse",
    "ImageResponse",
    "ImageTagResponse",
    "ImageTypeSummary",
    "RegionLabelResponse",
    "RegionResponse",
]
