"""Recipe detail cache.

Detail generation is expensive, so results are memoized under
"{dayIndex}-{mealIndex}-{mealName}". Entries are filled lazily on first view
and never invalidated automatically.
"""
import logging
from typing import Callable, Dict, Optional

from weekplan.domain.Meal import Meal
from weekplan.domain.RecipeDetails import RecipeDetails
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.logic.plan.mutations import check_meal_index
from weekplan.utilities.errors import GenerationFailure

logger = logging.getLogger(__name__)


def cache_key(day_index: int, meal_index: int, meal_name: str) -> str:
    return f"{day_index}-{meal_index}-{meal_name}"


class RecipeDetailCache:
    def __init__(self):
        self._entries: Dict[str, RecipeDetails] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, day_index: int, meal_index: int, meal_name: str) -> Optional[RecipeDetails]:
        return self._entries.get(cache_key(day_index, meal_index, meal_name))

    def put(self, day_index: int, meal_index: int, meal_name: str, details: RecipeDetails) -> None:
        self._entries[cache_key(day_index, meal_index, meal_name)] = details

    def clear(self) -> None:
        self._entries.clear()


def fallback_recipe(meal: Meal) -> RecipeDetails:
    """Deterministic minimal recipe built from the meal's own name and macros."""
    if meal.is_fasting:
        return RecipeDetails(
            ingredients=["Water", "Unsweetened tea or coffee (optional)"],
            instructions=["Stay hydrated during the fasting window."],
            tips=["Break the fast gently with your next planned meal."],
        )
    ingredients = [f"Main ingredients for {meal.name}"]
    if meal.proteins:
        ingredients.append(f"Protein source (about {meal.proteins} g protein)")
    if meal.carbs:
        ingredients.append(f"Carbohydrate source (about {meal.carbs} g carbs)")
    if meal.fats:
        ingredients.append(f"Fat source (about {meal.fats} g fats)")
    prep = f"about {meal.prep_time} minutes" if meal.prep_time else "a few minutes"
    instructions = [
        f"Gather and prepare the ingredients for {meal.name}.",
        f"Cook or assemble the dish, allowing {prep}.",
        f"Serve one portion (about {meal.calories} kcal).",
    ]
    tips = []
    if meal.description:
        tips.append(meal.description)
    tips.append("Detailed recipe unavailable right now, try again later for full instructions.")
    return RecipeDetails(ingredients=ingredients, instructions=instructions, tips=tips)


async def get_or_generate(cache: RecipeDetailCache, plan: WeeklyPlan, day_index: int, meal_index: int,
                          gateway, keep: Optional[Callable[[], bool]] = None) -> RecipeDetails:
    """Return cached details, generating and caching them on a miss.

    When generation fails the local fallback is returned and nothing is cached,
    so a later view retries the gateway. `keep`, when given, is asked after the
    gateway answers; a false answer returns the details without caching them.
    """
    check_meal_index(plan, day_index, meal_index)
    meal = plan.days[day_index].meals[meal_index]
    cached = cache.get(day_index, meal_index, meal.name)
    if cached is not None:
        return cached
    if meal.is_fasting:
        return fallback_recipe(meal)
    try:
        details = await gateway.generate_recipe_details(meal)
    except GenerationFailure as e:
        logger.warning("Recipe details for '%s' unavailable (%s); using fallback", meal.name, e)
        return fallback_recipe(meal)
    except Exception:
        logger.exception("Unexpected error generating recipe details for '%s'", meal.name)
        return fallback_recipe(meal)
    if details is None or not details.ingredients or not details.instructions:
        logger.warning("Recipe details for '%s' came back empty; using fallback", meal.name)
        return fallback_recipe(meal)
    if keep is not None and not keep():
        logger.info("Plan replaced while generating details for '%s'; not caching", meal.name)
        return details
    cache.put(day_index, meal_index, meal.name, details)
    return details


__all__ = ["RecipeDetailCache", "cache_key", "fallback_recipe", "get_or_generate"]
