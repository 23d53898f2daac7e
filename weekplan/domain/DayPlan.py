"""DayPlan domain entity: one day's ordered meals plus the derived calorie total."""
from dataclasses import dataclass, field
from typing import List

from weekplan.domain.Meal import Meal


@dataclass
class DayPlan:
    day: str
    meals: List[Meal] = field(default_factory=list)
    # Derived; kept consistent by logic.plan.totals.recompute_day_total
    total_calories: int = 0

    def __str__(self) -> str:
        meals_str = ",\n\t".join(str(m) for m in self.meals)
        return f"{self.day} ({self.total_calories} kcal):\n\t{meals_str}"

    def non_fasting_indices(self) -> List[int]:
        return [i for i, m in enumerate(self.meals) if not m.is_fasting]

    @staticmethod
    def from_dict(data) -> "DayPlan":
        d = dict(data) if isinstance(data, dict) else {}
        meals = [Meal.from_dict(m) for m in d.get("meals", []) or []]
        return DayPlan(
            day=d.get("day", "") or "",
            meals=meals,
            total_calories=sum(m.calories for m in meals),
        )

    def to_dict(self):
        return {
            "day": self.day,
            "meals": [m.to_dict() for m in self.meals],
            "totalCalories": self.total_calories,
        }
