# Pydantic schemas package
from taskboard.backend.schemas.base import (
    ApiResponse,
    CamelModel,
    ErrorDetail,
    ErrorResponse,
    PageInfo,
    PaginatedResponse,
    ResponseMetadata,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "PageInfo",
    "PaginatedResponse",
    "ResponseMetadata",
]
