"""WeeklyPlan aggregate: exactly seven DayPlans indexed 0 (first day) to 6 (last day)."""
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from weekplan.domain.DayPlan import DayPlan
from weekplan.utilities.constants import DAYS_IN_WEEK
from weekplan.utilities.errors import ValidationPrecondition


@dataclass(frozen=True, init=False)
class WeeklyPlan:
    days: tuple

    def __init__(self, days: Sequence[DayPlan]):
        days = tuple(days)
        if len(days) != DAYS_IN_WEEK:
            raise ValidationPrecondition(f"A weekly plan needs exactly {DAYS_IN_WEEK} days, got {len(days)}")
        object.__setattr__(self, "days", days)

    def __iter__(self) -> Iterator[DayPlan]:
        return iter(self.days)

    def __len__(self) -> int:
        return len(self.days)

    def __getitem__(self, day_index: int) -> DayPlan:
        return self.days[day_index]

    def __str__(self) -> str:
        return "\n".join(str(d) for d in self.days)

    def with_day(self, day_index: int, day: DayPlan) -> "WeeklyPlan":
        """Return a new plan where only `day_index` is replaced; other days are shared by reference."""
        days: List[DayPlan] = list(self.days)
        days[day_index] = day
        return WeeklyPlan(days)

    def meal_names(self, exclude_day: int = -1) -> List[str]:
        return [m.name for i, d in enumerate(self.days) if i != exclude_day
                for m in d.meals if m.name]

    @property
    def total_calories(self) -> int:
        return sum(d.total_calories for d in self.days)

    @staticmethod
    def from_dict(data) -> "WeeklyPlan":
        d = dict(data) if isinstance(data, dict) else {}
        return WeeklyPlan([DayPlan.from_dict(day) for day in d.get("days", []) or []])

    def to_dict(self):
        return {"days": [d.to_dict() for d in self.days]}
