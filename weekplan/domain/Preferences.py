"""Preferences input record: targets and constraints handed to the generation gateway (never mutated)."""
from dataclasses import dataclass, field
from typing import Optional

from weekplan.utilities.constants import (
    DEFAULT_COOKING_TIME_WEEKDAY, DEFAULT_COOKING_TIME_WEEKEND, WEEKEND_DAYS
)


@dataclass(frozen=True)
class FastingSchedule:
    type: str = "none"
    eating_window_start: Optional[str] = None
    eating_window_end: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.type != "none"


@dataclass(frozen=True)
class Preferences:
    daily_calories: int = 2000
    proteins: int = 75
    carbs: int = 250
    fats: int = 65
    diet_type: Optional[str] = None
    allergies: tuple = field(default_factory=tuple)
    goals: Optional[str] = None
    include_cheat_meal: bool = False
    cooking_skill_level: Optional[str] = None
    cooking_time_weekday: Optional[int] = None
    cooking_time_weekend: Optional[int] = None
    fasting_schedule: Optional[FastingSchedule] = None
    weekly_budget: Optional[float] = None
    price_preference: Optional[str] = None

    def max_cooking_time(self, day_index: int) -> int:
        if day_index in WEEKEND_DAYS:
            return self.cooking_time_weekend or DEFAULT_COOKING_TIME_WEEKEND
        return self.cooking_time_weekday or DEFAULT_COOKING_TIME_WEEKDAY

    def allergies_text(self) -> str:
        return ", ".join(self.allergies) if self.allergies else "none"

    @staticmethod
    def from_dict(data) -> "Preferences":
        '''Builds Preferences from a camelCase dictionary (the shape the client sends).'''
        from weekplan.utilities.validators import PreferencesInput
        return PreferencesInput.model_validate(data or {}).to_preferences()

    def to_dict(self):
        fasting = None
        if self.fasting_schedule is not None:
            fasting = {
                "type": self.fasting_schedule.type,
                "eatingWindowStart": self.fasting_schedule.eating_window_start,
                "eatingWindowEnd": self.fasting_schedule.eating_window_end,
            }
        return {
            "dailyCalories": self.daily_calories,
            "proteins": self.proteins,
            "carbs": self.carbs,
            "fats": self.fats,
            "dietType": self.diet_type,
            "allergies": list(self.allergies),
            "goals": self.goals,
            "includeCheatMeal": self.include_cheat_meal,
            "cookingSkillLevel": self.cooking_skill_level,
            "cookingTimeWeekday": self.cooking_time_weekday,
            "cookingTimeWeekend": self.cooking_time_weekend,
            "fastingSchedule": fasting,
            "weeklyBudget": self.weekly_budget,
            "pricePreference": self.price_preference,
        }
