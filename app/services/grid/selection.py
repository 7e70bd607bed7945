from __future__ import annotations

import enum
from collections.abc import Hashable, Iterable
from dataclasses import dataclass


class SelectAllState(enum.Enum):
    checked = "checked"
    indeterminate = "indeterminate"
    unchecked = "unchecked"


@dataclass(frozen=True)
class Selection:
    """Row ids marked for a bulk action, in the order they were marked.

    Keyed by row id only, so it is unaffected by sorting and paging. Ids of
    rows that disappear on reload are kept until the selection is cleared or
    replaced.
    """

    ids: tuple[Hashable, ...] = ()

    @property
    def selected(self) -> frozenset[Hashable]:
        return frozenset(self.ids)

    def __contains__(self, row_id: Hashable) -> bool:
        return row_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def toggle(self, row_id: Hashable) -> Selection:
        if row_id in self.ids:
            return Selection(tuple(item for item in self.ids if item != row_id))
        return Selection(self.ids + (row_id,))

    def select_all(self, eligible_ids: Iterable[Hashable]) -> Selection:
        return Selection(tuple(dict.fromkeys(eligible_ids)))

    def clear(self) -> Selection:
        return Selection()

    def all_state(self, eligible_ids: Iterable[Hashable]) -> SelectAllState:
        eligible = list(eligible_ids)
        if not eligible:
            return SelectAllState.unchecked
        selected = self.selected
        present = sum(1 for row_id in eligible if row_id in selected)
        if present == len(eligible):
            return SelectAllState.checked
        if present:
            return SelectAllState.indeterminate
        return SelectAllState.unchecked

    def toggle_all(self, eligible_ids: Iterable[Hashable]) -> Selection:
        eligible = list(eligible_ids)
        if self.all_state(eligible) == SelectAllState.checked:
            return self.clear()
        return self.select_all(eligible)
