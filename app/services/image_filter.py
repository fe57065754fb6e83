"""
Image list filter compilation.

ImageFilter is the normalized, request-scoped description of which images
qualify for a listing or position query. compile_image_filter() turns it
into WHERE conditions over the images table; each present dimension adds
one AND-ed group and multi-valued dimensions compile to IN lists.

Publisher/verifier ids and publish/verify times are 0 until the image
reaches the matching status, so every predicate on those columns is
conjoined with the status restriction that makes them meaningful.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, ColumnElement, String, and_, or_, true
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.compiler import SQLCompiler
from sqlalchemy.sql.functions import FunctionElement

from app.config import PUBLISHED_IMAGE_STATUSES, VALID_IMAGE_STATUSES, ImageStatus
from app.core.errors import InvalidArgumentError
from app.models.image import Images

# LIKE wildcards that must be matched literally inside a filename query
_LIKE_ESCAPE_CHAR = "\\"

# Binary collation that makes LIKE compare case-sensitively on MySQL
MYSQL_CASE_SENSITIVE_COLLATION = "utf8mb4_bin"


class contains_case_sensitive(FunctionElement[bool]):
    """
    ``column`` contains ``substring``, compared case-sensitively on every backend.

    Arguments are the column, the escaped ``%substring%`` LIKE pattern and the
    raw substring; each dialect renders whichever form it can compare
    case-sensitively:

    - MySQL: ``column COLLATE utf8mb4_bin LIKE pattern``
    - SQLite (LIKE ignores ASCII case): ``instr(column, substring) > 0``
    - others (LIKE is already case-sensitive): ``column LIKE pattern``
    """

    type = Boolean()
    inherit_cache = True
    name = "contains_case_sensitive"


def _escape_clause(compiler: SQLCompiler) -> str:
    return f" ESCAPE {compiler.render_literal_value(_LIKE_ESCAPE_CHAR, String())}"


@compiles(contains_case_sensitive)
def _compile_contains_case_sensitive(
    element: contains_case_sensitive, compiler: SQLCompiler, **kw: Any
) -> str:
    column, pattern, _ = element.clauses.clauses
    return (
        f"{compiler.process(column, **kw)} LIKE {compiler.process(pattern, **kw)}"
        f"{_escape_clause(compiler)}"
    )


@compiles(contains_case_sensitive, "mysql")
def _compile_contains_case_sensitive_mysql(
    element: contains_case_sensitive, compiler: SQLCompiler, **kw: Any
) -> str:
    column, pattern, _ = element.clauses.clauses
    return (
        f"{compiler.process(column, **kw)} COLLATE {MYSQL_CASE_SENSITIVE_COLLATION} "
        f"LIKE {compiler.process(pattern, **kw)}{_escape_clause(compiler)}"
    )


@compiles(contains_case_sensitive, "sqlite")
def _compile_contains_case_sensitive_sqlite(
    element: contains_case_sensitive, compiler: SQLCompiler, **kw: Any
) -> str:
    column, _, substring = element.clauses.clauses
    return f"instr({compiler.process(column, **kw)}, {compiler.process(substring, **kw)}) > 0"


@dataclass(slots=True)
class ImageFilter:
    """
    Normalized image filter.

    Empty lists, zero times and an empty filename query mean "no
    restriction". image_ids is different: None means "no restriction"
    while an empty set matches nothing. A None entry in image_type_ids
    stands for "image has no type".
    """

    image_ids: set[int] | None = None
    image_type_ids: list[int | None] = field(default_factory=list)
    uploaded_by_user_ids: list[int] = field(default_factory=list)
    not_uploaded_by_user_ids: list[int] = field(default_factory=list)
    published_by_user_ids: list[int] = field(default_factory=list)
    verified_by_user_ids: list[int] = field(default_factory=list)
    upload_time_start: int = 0
    upload_time_end: int = 0
    publish_time_start: int = 0
    publish_time_end: int = 0
    verify_time_start: int = 0
    verify_time_end: int = 0
    original_file_name_query: str = ""
    image_statuses: list[int] = field(default_factory=list)
    must_have_description: bool = False


def validate_image_statuses(image_statuses: Iterable[int]) -> None:
    """
    Raises:
        InvalidArgumentError: If any value is not a known ImageStatus
    """
    for image_status in image_statuses:
        if image_status not in VALID_IMAGE_STATUSES:
            raise InvalidArgumentError(
                f"invalid image status value {image_status}",
                dimension="image_statuses",
                image_status=image_status,
            )


def escape_like_pattern(query: str) -> str:
    """Escape LIKE wildcards so `query` matches as a plain substring."""
    return (
        query.replace(_LIKE_ESCAPE_CHAR, _LIKE_ESCAPE_CHAR * 2)
        .replace("%", _LIKE_ESCAPE_CHAR + "%")
        .replace("_", _LIKE_ESCAPE_CHAR + "_")
    )


def _is_published() -> ColumnElement[bool]:
    return Images.status.in_(PUBLISHED_IMAGE_STATUSES)  # type: ignore[attr-defined]


def _is_verified() -> ColumnElement[bool]:
    return Images.status == ImageStatus.VERIFIED  # type: ignore[return-value]


def _time_range_conditions(
    column: ColumnElement[int], start: int, end: int
) -> list[ColumnElement[bool]]:
    conditions = []
    if start != 0:
        conditions.append(column >= start)
    if end != 0:
        conditions.append(column <= end)
    return conditions


def compile_image_filter(image_filter: ImageFilter) -> list[ColumnElement[bool]]:
    """
    Compile an ImageFilter into a list of conditions to be AND-ed together.

    Args:
        image_filter: Normalized filter

    Returns:
        One condition per present dimension (empty when nothing is restricted)

    Raises:
        InvalidArgumentError: If image_statuses holds an unknown status
    """
    validate_image_statuses(image_filter.image_statuses)

    conditions: list[ColumnElement[bool]] = []

    if image_filter.image_ids is not None:
        conditions.append(Images.image_id.in_(sorted(image_filter.image_ids)))  # type: ignore[union-attr]

    if image_filter.image_type_ids:
        type_ids = sorted({type_id for type_id in image_filter.image_type_ids if type_id is not None})
        type_condition: ColumnElement[bool] = Images.image_type_id.in_(type_ids)  # type: ignore[union-attr]
        if None in image_filter.image_type_ids:
            type_condition = or_(type_condition, Images.image_type_id.is_(None))  # type: ignore[union-attr]
        conditions.append(type_condition)

    if image_filter.uploaded_by_user_ids:
        conditions.append(
            Images.uploaded_by_user_id.in_(image_filter.uploaded_by_user_ids)  # type: ignore[attr-defined]
        )

    if image_filter.not_uploaded_by_user_ids:
        conditions.append(
            Images.uploaded_by_user_id.not_in(image_filter.not_uploaded_by_user_ids)  # type: ignore[attr-defined]
        )

    if image_filter.published_by_user_ids:
        conditions.append(
            and_(
                _is_published(),
                Images.published_by_user_id.in_(image_filter.published_by_user_ids),  # type: ignore[attr-defined]
            )
        )

    if image_filter.verified_by_user_ids:
        conditions.append(
            and_(
                _is_verified(),
                Images.verified_by_user_id.in_(image_filter.verified_by_user_ids),  # type: ignore[attr-defined]
            )
        )

    conditions.extend(
        _time_range_conditions(
            Images.upload_time,  # type: ignore[arg-type]
            image_filter.upload_time_start,
            image_filter.upload_time_end,
        )
    )

    publish_time_conditions = _time_range_conditions(
        Images.publish_time,  # type: ignore[arg-type]
        image_filter.publish_time_start,
        image_filter.publish_time_end,
    )
    if publish_time_conditions:
        conditions.append(and_(_is_published(), *publish_time_conditions))

    verify_time_conditions = _time_range_conditions(
        Images.verify_time,  # type: ignore[arg-type]
        image_filter.verify_time_start,
        image_filter.verify_time_end,
    )
    if verify_time_conditions:
        conditions.append(and_(_is_verified(), *verify_time_conditions))

    if image_filter.original_file_name_query != "":
        query = image_filter.original_file_name_query
        conditions.append(
            contains_case_sensitive(
                Images.original_file_name, f"%{escape_like_pattern(query)}%", query
            )
        )

    if image_filter.image_statuses:
        conditions.append(Images.status.in_(image_filter.image_statuses))  # type: ignore[attr-defined]

    if image_filter.must_have_description:
        conditions.append(Images.description != "")  # type: ignore[arg-type]

    return conditions


def image_filter_clause(image_filter: ImageFilter) -> ColumnElement[bool]:
    """Single WHERE clause for `image_filter`; TRUE when nothing is restricted."""
    conditions = compile_image_filter(image_filter)
    if not conditions:
        return true()
    return and_(*conditions)
