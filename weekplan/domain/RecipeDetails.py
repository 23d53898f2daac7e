"""RecipeDetails value: the expensive, lazily generated part of a meal (ingredients, steps, tips)."""
from dataclasses import dataclass, field
from typing import List


@dataclass
class RecipeDetails:
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{len(self.ingredients)} ingredients, {len(self.instructions)} steps, {len(self.tips)} tips"

    def to_dict(self):
        return {
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
            "tips": list(self.tips),
        }
