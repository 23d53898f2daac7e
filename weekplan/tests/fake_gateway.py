"""In-memory generation gateway and sample plans for tests."""
import asyncio
import copy
from typing import List, Optional

from weekplan.domain.DayPlan import DayPlan
from weekplan.domain.Meal import Meal
from weekplan.domain.RecipeDetails import RecipeDetails
from weekplan.domain.ShoppingList import ShoppingCategory, ShoppingItem, ShoppingList
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.infra.Generation_Gateway import GenerationGateway
from weekplan.utilities.constants import DAYS
from weekplan.utilities.errors import GenerationFailure


def meal(meal_type, name, calories, **kw):
    return Meal(type=meal_type, name=name, calories=calories, **kw)


def day(label, *meals):
    return DayPlan(day=label, meals=list(meals), total_calories=sum(m.calories for m in meals))


def sample_plan(prefix="") -> WeeklyPlan:
    days = []
    for i, label in enumerate(DAYS):
        days.append(day(
            label,
            meal("breakfast", f"{prefix}Porridge {i}", 400, proteins=12),
            meal("lunch", f"{prefix}Chicken salad {i}", 600, proteins=35),
            meal("snack", f"{prefix}Yoghurt {i}", 200, proteins=10),
            meal("dinner", f"{prefix}Vegetable soup {i}", 500, proteins=20),
        ))
    return WeeklyPlan(days)


class FakeGateway(GenerationGateway):
    def __init__(self):
        self.fail = False
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self.generation = 0
        self.day_meals = None
        self.details = RecipeDetails(
            ingredients=["200 g oats", "300 ml milk"],
            instructions=["Bring the milk to a simmer.", "Stir in the oats."],
            tips=["Top with fruit."],
        )
        self.shopping = ShoppingList(
            categories=[
                ShoppingCategory("Fruits & Vegetables",
                                 [ShoppingItem("Tomatoes", "1 kg", 3.5), ShoppingItem("Carrots", "500 g", 1.5)], 5.0),
                ShoppingCategory("Groceries", [ShoppingItem("Oats", "1 kg", 80.0)], 80.0),
            ],
            total_estimate=85.0,
            savings_tips=["Buy seasonal vegetables."],
        )

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise GenerationFailure("backend unavailable")

    async def generate_weekly_plan(self, preferences):
        self.calls.append(("generate_weekly_plan", preferences))
        await self._wait()
        self.generation += 1
        return sample_plan(prefix=f"G{self.generation} ")

    async def regenerate_day(self, day_index, preferences, current_plan):
        self.calls.append(("regenerate_day", day_index, current_plan))
        await self._wait()
        if self.day_meals is not None:
            return DayPlan(day="Generated", meals=list(self.day_meals))
        return DayPlan(day="Generated", meals=[
            meal("breakfast", f"New toast {day_index}", 350),
            meal("lunch", f"New pasta {day_index}", 700),
            meal("dinner", f"New omelette {day_index}", 450),
        ])

    async def generate_recipe_details(self, meal_):
        self.calls.append(("generate_recipe_details", meal_.name))
        await self._wait()
        return self.details

    async def generate_shopping_list(self, plan, weekly_budget=None, price_preference=None):
        self.calls.append(("generate_shopping_list", weekly_budget, price_preference))
        await self._wait()
        return copy.deepcopy(self.shopping)
