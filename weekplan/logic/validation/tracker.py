"""Validation tracker: which meals the user confirmed they will eat.

Keys are positional, "{dayIndex}-{mealIndex}". They are dropped for a day
when that day is regenerated and entirely on full regeneration, but they are
not renumbered when meals are inserted, deleted or reordered.
"""
from typing import Iterable, List, Set

from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.logic.plan.mutations import check_day_index


def validation_key(day_index: int, meal_index: int) -> str:
    return f"{day_index}-{meal_index}"


class ValidationTracker:
    def __init__(self, keys: Iterable[str] = ()):
        self._keys: Set[str] = set(keys)

    def __contains__(self, key: str) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"ValidationTracker({sorted(self._keys)})"

    def keys(self) -> Set[str]:
        return set(self._keys)

    def toggle(self, key: str) -> bool:
        '''
        Flips membership of `key`. Returns True if the key is now validated.
        '''
        if key in self._keys:
            self._keys.discard(key)
            return False
        self._keys.add(key)
        return True

    def toggle_meal(self, day_index: int, meal_index: int) -> bool:
        return self.toggle(validation_key(day_index, meal_index))

    def is_validated(self, day_index: int, meal_index: int) -> bool:
        return validation_key(day_index, meal_index) in self._keys

    def _day_keys(self, plan: WeeklyPlan, day_index: int) -> List[str]:
        check_day_index(day_index)
        day = plan.days[day_index]
        return [validation_key(day_index, i) for i in day.non_fasting_indices()]

    def is_day_fully_validated(self, plan: WeeklyPlan, day_index: int) -> bool:
        """True iff every non-fasting meal of the day is validated (False for a day with none)."""
        keys = self._day_keys(plan, day_index)
        return bool(keys) and all(k in self._keys for k in keys)

    def validate_all_for_day(self, plan: WeeklyPlan, day_index: int) -> bool:
        """Toggle the aggregate for a day.

        If every non-fasting meal is already validated, all of them are
        unvalidated; otherwise all of them are validated. Returns the new
        fully-validated state of the day.
        """
        keys = self._day_keys(plan, day_index)
        if not keys:
            return False
        if all(k in self._keys for k in keys):
            self._keys.difference_update(keys)
            return False
        self._keys.update(keys)
        return True

    def validated_count(self, plan: WeeklyPlan, day_index: int) -> int:
        return sum(1 for k in self._day_keys(plan, day_index) if k in self._keys)

    def clear_day(self, day_index: int) -> int:
        """Drop every key of `day_index`, whatever the meal index. Returns how many were removed."""
        prefix = f"{day_index}-"
        stale = {k for k in self._keys if k.startswith(prefix)}
        self._keys -= stale
        return len(stale)

    def clear(self) -> None:
        self._keys.clear()


__all__ = ["ValidationTracker", "validation_key"]
