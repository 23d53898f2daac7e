"""Meal domain entity: one scheduled eating occasion with nutrition facts."""
from dataclasses import dataclass
from typing import Optional

from weekplan.utilities.constants import MEAL_TYPES


def _to_int(value) -> int:
    try:
        return int(round(float(value or 0)))
    except (TypeError, ValueError):
        return 0


@dataclass
class Meal:
    type: str
    name: str
    description: str = ""
    calories: int = 0
    proteins: int = 0
    carbs: int = 0
    fats: int = 0
    prep_time: int = 0
    is_cheat_meal: bool = False
    is_fasting: bool = False
    recipe_id: Optional[str] = None
    image_url: Optional[str] = None
    from_database: bool = False

    def __post_init__(self):
        if self.type not in MEAL_TYPES:
            raise ValueError(f"Unknown meal type: {self.type!r}")

    def __str__(self) -> str:
        flags = []
        if self.is_cheat_meal:
            flags.append("cheat")
        if self.is_fasting:
            flags.append("fasting")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.type}: {self.name} - {self.calories} kcal (P {self.proteins}g / C {self.carbs}g / F {self.fats}g){suffix}"

    @staticmethod
    def from_dict(data) -> "Meal":
        '''Creates a Meal from its wire dictionary (camelCase keys). Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        return Meal(
            type=d.get("type", ""),
            name=d.get("name", "") or "",
            description=d.get("description", "") or "",
            calories=_to_int(d.get("calories")),
            proteins=_to_int(d.get("proteins")),
            carbs=_to_int(d.get("carbs")),
            fats=_to_int(d.get("fats")),
            prep_time=_to_int(d.get("prepTime")),
            is_cheat_meal=bool(d.get("isCheatMeal", False)),
            is_fasting=bool(d.get("isFasting", False)),
            recipe_id=d.get("recipeId"),
            image_url=d.get("imageUrl"),
            from_database=bool(d.get("fromDatabase", False)),
        )

    def to_dict(self):
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "calories": self.calories,
            "proteins": self.proteins,
            "carbs": self.carbs,
            "fats": self.fats,
            "prepTime": self.prep_time,
            "isCheatMeal": self.is_cheat_meal,
            "isFasting": self.is_fasting,
            "recipeId": self.recipe_id,
            "imageUrl": self.image_url,
            "fromDatabase": self.from_database,
        }
