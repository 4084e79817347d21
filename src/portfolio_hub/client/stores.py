"""UI state for the portfolio, project and skill screens.

Each store keeps the current filters, view mode, selection and busy flags
for one screen. ``apply`` runs the filters over a fetched list locally so
the view can re-filter without another request.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Literal

SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class PortfolioFilters:
    search: str = ""
    sort_by: Literal["title", "created_at", "updated_at"] = "updated_at"
    sort_order: SortOrder = "desc"
    is_public: bool | None = None


@dataclass(frozen=True)
class ProjectFilters:
    search: str = ""
    sort_by: Literal["title", "created_at", "updated_at", "start_date"] = "updated_at"
    sort_order: SortOrder = "desc"
    status: Literal["active", "completed"] | None = None
    portfolio_id: int | None = None


@dataclass(frozen=True)
class SkillFilters:
    search: str = ""
    sort_by: Literal["name", "category", "created_at"] = "name"
    sort_order: SortOrder = "asc"
    category: str | None = None


def _sorted(items: list[dict], sort_by: str, order: SortOrder) -> list[dict]:
    """Sort by one field; items missing the field always go last."""
    present = [item for item in items if item.get(sort_by) is not None]
    missing = [item for item in items if item.get(sort_by) is None]

    def key(item: dict) -> Any:
        value = item[sort_by]
        return value.lower() if isinstance(value, str) else value

    present.sort(key=key, reverse=order == "desc")
    return present + missing


@dataclass
class _Store:
    search_fields: ClassVar[tuple[str, ...]] = ()
    view_modes: ClassVar[tuple[str, ...]] = ("grid", "list")

    view_mode: str = "grid"
    selected: dict | None = None
    selected_ids: list[int] = field(default_factory=list)
    is_creating: bool = False
    is_updating: bool = False
    is_deleting: bool = False

    def set_view_mode(self, mode: str) -> None:
        if mode not in self.view_modes:
            raise ValueError(f"Unknown view mode {mode!r}; expected one of {self.view_modes}")
        self.view_mode = mode

    def select(self, item: dict | None) -> None:
        self.selected = item

    def set_selected_ids(self, ids: list[int]) -> None:
        self.selected_ids = list(ids)

    def toggle_selection(self, item_id: int) -> None:
        if item_id in self.selected_ids:
            self.selected_ids = [i for i in self.selected_ids if i != item_id]
        else:
            self.selected_ids = [*self.selected_ids, item_id]

    def clear_selection(self) -> None:
        self.selected = None
        self.selected_ids = []

    def set_filters(self, **changes: Any) -> None:
        self.filters = replace(self.filters, **changes)

    def reset_filters(self) -> None:
        self.filters = type(self.filters)()

    def _matches_search(self, item: dict) -> bool:
        needle = self.filters.search.strip().lower()
        if not needle:
            return True
        return any(needle in str(item.get(name) or "").lower() for name in self.search_fields)

    def _matches(self, item: dict) -> bool:
        return self._matches_search(item)

    def apply(self, items: list[dict]) -> list[dict]:
        """Filter and sort ``items`` by the current filters."""
        kept = [item for item in items if self._matches(item)]
        return _sorted(kept, self.filters.sort_by, self.filters.sort_order)


@dataclass
class PortfolioStore(_Store):
    search_fields: ClassVar[tuple[str, ...]] = ("title", "description")
    view_modes: ClassVar[tuple[str, ...]] = ("grid", "list")

    filters: PortfolioFilters = field(default_factory=PortfolioFilters)

    def _matches(self, item: dict) -> bool:
        if self.filters.is_public is not None and item.get("is_public") != self.filters.is_public:
            return False
        return self._matches_search(item)


@dataclass
class ProjectStore(_Store):
    search_fields: ClassVar[tuple[str, ...]] = ("title", "description")
    view_modes: ClassVar[tuple[str, ...]] = ("grid", "list", "timeline")

    filters: ProjectFilters = field(default_factory=ProjectFilters)

    def _matches(self, item: dict) -> bool:
        status = self.filters.status
        if status is not None and bool(item.get("is_completed")) != (status == "completed"):
            return False
        portfolio_id = self.filters.portfolio_id
        if portfolio_id is not None and item.get("portfolio_id") != portfolio_id:
            return False
        return self._matches_search(item)


@dataclass
class SkillStore(_Store):
    search_fields: ClassVar[tuple[str, ...]] = ("name", "category", "description")
    view_modes: ClassVar[tuple[str, ...]] = ("grid", "list", "chart")

    filters: SkillFilters = field(default_factory=SkillFilters)

    def _matches(self, item: dict) -> bool:
        category = self.filters.category
        if category and str(item.get("category", "")).lower() != category.lower():
            return False
        return self._matches_search(item)
