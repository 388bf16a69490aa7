"""Page/per-page handling shared by the list endpoints."""
from dataclasses import dataclass

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class Page:
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def clamp(cls, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> "Page":
        """Out-of-range values fall back to the nearest valid one."""
        if per_page < 1:
            per_page = DEFAULT_PER_PAGE
        return cls(page=max(page, 1), per_page=min(per_page, MAX_PER_PAGE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def total_pages(self, total: int) -> int:
        if total <= 0:
            return 0
        return (total + self.per_page - 1) // self.per_page
