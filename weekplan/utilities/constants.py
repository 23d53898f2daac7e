from typing import Final

DAYS: Final[tuple[str, ...]] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
)
DAYS_IN_WEEK: Final[int] = 7

MEAL_TYPES: Final[tuple[str, ...]] = ("breakfast", "lunch", "snack", "dinner")
MEAL_TYPE_ORDER: Final[dict[str, int]] = {t: i for i, t in enumerate(MEAL_TYPES)}

# Share of the daily calorie target assigned to each meal type
CALORIE_SPLIT: Final[dict[str, float]] = {
    "breakfast": 0.25,
    "lunch": 0.35,
    "snack": 0.10,
    "dinner": 0.30,
}
CHEAT_MEAL_FACTOR: Final[float] = 2.5
CHEAT_MEAL_DAYS: Final[tuple[int, ...]] = (4, 5, 6)
CHEAT_MEAL_TYPES: Final[tuple[str, ...]] = ("lunch", "dinner")

WEEKEND_DAYS: Final[tuple[int, ...]] = (5, 6)
DEFAULT_COOKING_TIME_WEEKDAY: Final[int] = 20
DEFAULT_COOKING_TIME_WEEKEND: Final[int] = 45

# Intermittent fasting
WINDOW_FASTING_TYPES: Final[tuple[str, ...]] = ("16_8", "18_6", "20_4")
FASTING_5_2_DAYS: Final[tuple[int, ...]] = (1, 4)
FASTING_DAY_MEAL_FACTOR: Final[float] = 0.3
DEFAULT_EATING_WINDOW_START: Final[str] = "12:00"
DEFAULT_EATING_WINDOW_END: Final[str] = "20:00"
FASTING_MEAL_NAME: Final[str] = "Fasting - Water/Tea/Coffee"
FASTING_MEAL_DESCRIPTION: Final[str] = "Fasting window - hydration only"

# How many already used titles are sent back to the model
USED_TITLES_WEEK_LIMIT: Final[int] = 10
USED_TITLES_DAY_LIMIT: Final[int] = 5

# Minimum content for a generated recipe to be usable
MIN_RECIPE_INGREDIENTS: Final[int] = 1
MIN_RECIPE_INSTRUCTIONS: Final[int] = 1

# Stored recipes are reused when their calories are this close to the slot target
RECIPE_CALORIE_TOLERANCE: Final[int] = 100
RECIPE_SEARCH_LIMIT: Final[int] = 10

SIMPLE_RECIPE_GUIDELINES: Final[str] = (
    """
    RULES FOR EVERY RECIPE:
    - Everyday home cooking only, ingredients from any supermarket
    - No restaurant dishes, no rare or expensive ingredients
    - At most 6-8 ingredients and 5-6 short steps
    - Realistic preparation time
    - Breakfast stays light and mostly sweet (toast, cereal, porridge), a light savoury touch is fine
    """
)

MEAL_TYPE_GUIDELINES: Final[dict[str, str]] = {
    "breakfast": "Breakfast: quick, mostly sweet, no full cooked dishes.",
    "lunch": "Lunch: the most substantial meal, balanced plate with protein, starch and vegetables.",
    "snack": "Snack: small, portable, fruit, yoghurt, nuts or a small sandwich.",
    "dinner": "Dinner: lighter than lunch, vegetables first, easy to digest.",
    "cheat_meal": "Cheat meal: indulgent comfort food, generous and fun, dietary constraints relaxed.",
}

MEAL_JSON_FORMAT: Final[str] = (
    """
{
    "title": str,
    "description": str (one sentence),
    "macros": {
      "calories": int,
      "proteins": int,
      "carbs": int,
      "fats": int
    },
    "prepTime": int (minutes)
}
    """
)

RECIPE_DETAILS_JSON_FORMAT: Final[str] = (
    """
{
    "ingredients": [str, str],
    "instructions": [str, str],
    "tips": [str]
}
    """
)

SHOPPING_LIST_JSON_FORMAT: Final[str] = (
    """
{
    "categories": [
      {
        "name": str,
        "items": [
          {"name": str, "quantity": str, "priceEstimate": float}
        ],
        "subtotal": float
      }
    ],
    "totalEstimate": float,
    "savingsTips": [str]
}
    """
)
