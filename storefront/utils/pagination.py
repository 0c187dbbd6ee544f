import math

from sqlalchemy import func
from sqlmodel import select


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = 10,
    options=(),
):
    if page < 1:
        page = 1

    if limit < 1:
        limit = 10

    offset = (page - 1) * limit

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    results = session.exec(
        query.options(*options).offset(offset).limit(limit)
    ).all()

    return {
        "total_items": total,
        "total_pages": math.ceil(total / limit) if total else 0,
        "page": page,
        "limit": limit,
        "results": results,
    }
