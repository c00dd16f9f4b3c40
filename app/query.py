"""
Post list query builder.

Turns loosely-typed request parameters into a ``PostQuery``: page and
limit coerced to positive integers (falling back to defaults instead of
failing), an optional search term and an optional category filter.  Search
and category are used exactly as given whenever they are non-empty.  The
query then produces the SQL filter and pagination window used by
``post_service.list_posts``.

Search is a literal, case-insensitive substring match on title OR
content.  LIKE wildcards in the search term are escaped, so ``50%``
matches the text "50%" and nothing else.
"""
import math
from dataclasses import dataclass

from sqlalchemy import or_

from app.config import settings
from app.models import Post


def coerce_positive_int(raw, default: int) -> int:
    """
    Return *raw* as an int if it is a positive integer (or a string
    spelling one), else *default*.  Never raises.
    """
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw if raw > 0 else default
    if isinstance(raw, str):
        raw = raw.strip()
        if raw.isascii() and raw.isdigit() and int(raw) > 0:
            return int(raw)
    return default


@dataclass(frozen=True)
class PostQuery:
    page: int = 1
    limit: int = 10
    search: str = ""
    category: str = ""

    @classmethod
    def from_params(cls, page=None, limit=None, search=None, category=None) -> "PostQuery":
        return cls(
            page=coerce_positive_int(page, settings.DEFAULT_PAGE),
            limit=coerce_positive_int(limit, settings.DEFAULT_PAGE_SIZE),
            search=search if isinstance(search, str) else "",
            category=category if isinstance(category, str) else "",
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def conditions(self) -> list:
        """WHERE clauses for this query; empty means every post."""
        clauses = []
        if self.search:
            clauses.append(
                or_(
                    Post.title.icontains(self.search, autoescape=True),
                    Post.content.icontains(self.search, autoescape=True),
                )
            )
        if self.category:
            clauses.append(Post.category_id == self.category)
        return clauses

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total > 0 else 0
