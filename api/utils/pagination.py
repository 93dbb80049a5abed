from typing import Tuple

from flask import request, abort

MAX_LIMIT = 100


def parse_pagination(default_limit: int = 20) -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(default_limit)))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def paginate(query, page: int, limit: int):
    """Return (rows, meta) for one page of `query`."""
    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    pages = (total + limit - 1) // limit
    return rows, {"page": page, "limit": limit, "total": total, "pages": pages}
