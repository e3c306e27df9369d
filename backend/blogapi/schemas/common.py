"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from blogapi.repositories.base import Page
from blogapi.services._shared.base import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class PaginationQuerySchema(Schema):
    """Validate ``page``/``page_size`` and split the comma-separated ``sort``."""

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Integer(
        load_default=DEFAULT_PAGE_SIZE, validate=validate.Range(min=1, max=MAX_PAGE_SIZE)
    )
    sort = fields.String(load_default="")

    @post_load
    def split_sort(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        raw = data.get("sort") or ""
        data["sort"] = [segment.strip() for segment in raw.split(",") if segment.strip()]
        return data


class SearchQuerySchema(PaginationQuerySchema):
    q = fields.String(required=True, validate=validate.Length(min=1, max=200))


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    page = fields.Integer(required=True)
    page_size = fields.Integer(required=True)
    total = fields.Integer(required=True)
    total_pages = fields.Integer(required=True)


def build_meta(page: Page[Any]) -> dict[str, int]:
    """Return a ``meta`` mapping for paginated responses."""

    return {
        "page": int(page.page),
        "page_size": int(page.page_size),
        "total": int(page.total),
        "total_pages": int(page.total_pages),
    }
