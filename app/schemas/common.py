import math

from pydantic import BaseModel


class Pagination(BaseModel):
    total: int
    page: int
    pages: int
    limit: int


def paginate(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        total=total,
        page=page,
        pages=math.ceil(total / limit) if total > 0 else 0,
        limit=limit,
    )
