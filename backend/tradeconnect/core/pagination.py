"""Pagination - page math shared by every list endpoint."""

import math


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> dict:
    """{page, limit, total, pages, hasNext, hasPrevious}."""
    pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
        "hasNext": page < pages,
        "hasPrevious": page > 1,
    }
