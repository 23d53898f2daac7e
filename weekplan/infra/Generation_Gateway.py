"""Generation gateway: the contract the plan core consumes, plus the OpenAI-backed adapter.

Every method is a single-shot coroutine. Any failure (backend unreachable,
timeout, non-success response, unparseable or too thin content) surfaces as
GenerationFailure / EmptyResult; nothing partial is ever returned.
"""
import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from weekplan.domain.DayPlan import DayPlan
from weekplan.domain.Meal import Meal
from weekplan.domain.Preferences import Preferences
from weekplan.domain.RecipeDetails import RecipeDetails
from weekplan.domain.ShoppingList import ShoppingCategory, ShoppingItem, ShoppingList
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.infra.ai_output import parse_model_json
from weekplan.infra.Recipe_Repository import RecipeRepository
from weekplan.infra.paths import AI_LAST_FIXED_FILE, AI_LAST_RAW_FILE
from weekplan.utilities import config
from weekplan.utilities.constants import (
    CALORIE_SPLIT, CHEAT_MEAL_DAYS, CHEAT_MEAL_FACTOR, CHEAT_MEAL_TYPES, DAYS,
    DEFAULT_EATING_WINDOW_END, DEFAULT_EATING_WINDOW_START, FASTING_5_2_DAYS,
    FASTING_DAY_MEAL_FACTOR, FASTING_MEAL_DESCRIPTION, FASTING_MEAL_NAME, MEAL_JSON_FORMAT,
    MEAL_TYPE_GUIDELINES, MEAL_TYPES, MIN_RECIPE_INGREDIENTS, MIN_RECIPE_INSTRUCTIONS,
    RECIPE_CALORIE_TOLERANCE, RECIPE_DETAILS_JSON_FORMAT, SHOPPING_LIST_JSON_FORMAT, SIMPLE_RECIPE_GUIDELINES,
    USED_TITLES_DAY_LIMIT, USED_TITLES_WEEK_LIMIT, WINDOW_FASTING_TYPES,
)
from weekplan.utilities.errors import EmptyResult, GenerationFailure
from weekplan.utilities.validators import GeneratedMeal, GeneratedRecipe, GeneratedShoppingList

logger = logging.getLogger(__name__)


class GenerationGateway(ABC):
    @abstractmethod
    async def generate_weekly_plan(self, preferences: Preferences) -> WeeklyPlan:
        ...

    @abstractmethod
    async def regenerate_day(self, day_index: int, preferences: Preferences, current_plan: WeeklyPlan) -> DayPlan:
        ...

    @abstractmethod
    async def generate_recipe_details(self, meal: Meal) -> RecipeDetails:
        ...

    @abstractmethod
    async def generate_shopping_list(self, plan: WeeklyPlan, weekly_budget: Optional[float] = None,
                                     price_preference: Optional[str] = None) -> ShoppingList:
        ...


# === Prompt helpers ===
def window_start_hour(preferences: Preferences) -> Optional[int]:
    """Hour the eating window opens for window-based fasting, None otherwise."""
    fasting = preferences.fasting_schedule
    if fasting is None or fasting.type not in WINDOW_FASTING_TYPES:
        return None
    start = fasting.eating_window_start or DEFAULT_EATING_WINDOW_START
    try:
        return int(start.split(":")[0])
    except ValueError:
        return None


def skips_meal(preferences: Preferences, meal_type: str) -> bool:
    """Breakfast becomes a fasting slot when the eating window opens at noon or later."""
    hour = window_start_hour(preferences)
    return meal_type == "breakfast" and hour is not None and hour >= 12


def fasting_placeholder(meal_type: str) -> Meal:
    return Meal(
        type=meal_type,
        name=FASTING_MEAL_NAME,
        description=FASTING_MEAL_DESCRIPTION,
        is_fasting=True,
    )


def is_5_2_fasting_day(preferences: Preferences, day_index: int) -> bool:
    fasting = preferences.fasting_schedule
    return fasting is not None and fasting.type == "5_2" and day_index in FASTING_5_2_DAYS


def fasting_context(preferences: Preferences, day_index: int, calorie_target: float) -> str:
    fasting = preferences.fasting_schedule
    if fasting is None or not fasting.active:
        return ""
    if fasting.type in WINDOW_FASTING_TYPES:
        start = fasting.eating_window_start or DEFAULT_EATING_WINDOW_START
        end = fasting.eating_window_end or DEFAULT_EATING_WINDOW_END
        return (f"INTERMITTENT FASTING {fasting.type.replace('_', ':')}: eating window {start}-{end}. "
                "Meals inside the window should be more filling and nutritious.")
    if is_5_2_fasting_day(preferences, day_index):
        return ("FASTING DAY (5:2): the whole day stays around 500-600 kcal. "
                f"This meal must be very light: {round(calorie_target * FASTING_DAY_MEAL_FACTOR)} kcal max, "
                "vegetables and lean protein first.")
    return ""


def pick_cheat_slot(preferences: Preferences, rng: random.Random) -> Tuple[int, str]:
    """(day_index, meal_type) for the weekly cheat meal, or (-1, '') when not requested."""
    if not preferences.include_cheat_meal:
        return -1, ""
    return rng.choice(CHEAT_MEAL_DAYS), rng.choice(CHEAT_MEAL_TYPES)


class OpenAIGenerationGateway(GenerationGateway):
    """Gateway backed by an OpenAI model answering in JSON.

    With a recipe repository, stored recipes close to a slot's calorie target are
    reused before asking the model, and every generated recipe is stored so its
    meal carries a recipe id.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, *, model: Optional[str] = None,
                 timeout: Optional[float] = None, rng: Optional[random.Random] = None,
                 recipes: Optional[RecipeRepository] = None):
        self.recipes = recipes
        self.model = model or config.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else config.OPENAI_TIMEOUT
        self.rng = rng or random.Random()
        self._client = client

    # === Helper: Get OpenAI Client ===
    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not config.OPENAI_API_KEY:
                raise GenerationFailure("OPENAI_API_KEY not set", operation="client")
            self._client = AsyncOpenAI(api_key=config.OPENAI_API_KEY, timeout=self.timeout,
                                       max_retries=config.OPENAI_MAX_RETRIES)
        return self._client

    async def _complete(self, prompt: str, operation: str) -> str:
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.responses.create(model=self.model, input=prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationFailure(f"{operation}: model did not respond in {self.timeout}s",
                                    operation=operation) from e
        except OpenAIError as e:
            raise GenerationFailure(f"{operation}: {e}", operation=operation) from e
        return (response.output_text or "").strip()

    async def _complete_json(self, prompt: str, operation: str) -> Any:
        text = await self._complete(prompt, operation)
        if not text:
            raise EmptyResult(f"{operation}: model returned no content", operation=operation)
        parsed = parse_model_json(text)
        if parsed is not None:
            return parsed

        self._dump(AI_LAST_RAW_FILE, text)
        fixed = await self._request_json_fix(text, operation)
        if fixed:
            self._dump(AI_LAST_FIXED_FILE, fixed)
        parsed = parse_model_json(fixed) if fixed else None
        if parsed is None:
            logger.error("%s: model output is not valid JSON and no JSON substring found", operation)
            raise GenerationFailure(f"{operation}: unparseable model output", operation=operation)
        return parsed

    async def _request_json_fix(self, previous_output: str, operation: str) -> Optional[str]:
        """Ask the model to reformat previous_output as a strict JSON object."""
        prompt = (
            "The previous response was not valid JSON. "
            "Reformat ONLY the content as valid JSON (no surrounding text) using the same keys. "
            "Here is the original output:\n\n" + previous_output
        )
        try:
            return await self._complete(prompt, operation + " (fix)")
        except GenerationFailure:
            logger.exception("Error while requesting the model to fix JSON formatting")
            return None

    @staticmethod
    def _dump(path, text: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError:
            logger.exception("Failed to write %s", path.name)

    # === Meals ===
    def _reuse_recipe(self, meal_type: str, calorie_target: float, used_titles: List[str]) -> Optional[Meal]:
        if self.recipes is None:
            return None
        try:
            candidates = self.recipes.find(meal_type, max(0, calorie_target - RECIPE_CALORIE_TOLERANCE),
                                           calorie_target + RECIPE_CALORIE_TOLERANCE, exclude_titles=used_titles)
        except OSError:
            logger.exception("Failed to read stored recipes")
            return None
        if not candidates:
            return None
        meal = self.rng.choice(candidates)
        logger.info("Reusing stored recipe: %s", meal.name)
        used_titles.append(meal.name)
        return meal

    def _store_recipe(self, meal: Meal) -> Optional[str]:
        if self.recipes is None:
            return None
        try:
            return self.recipes.save_recipe(meal)
        except OSError:
            logger.exception("Failed to store recipe %s", meal.name)
            return None

    async def _generate_meal(self, meal_type: str, day_index: int, preferences: Preferences,
                             used_titles: List[str], *, cheat: bool = False,
                             used_limit: int = USED_TITLES_WEEK_LIMIT) -> Meal:
        day = DAYS[day_index]
        calorie_target = preferences.daily_calories * CALORIE_SPLIT[meal_type]
        max_time = preferences.max_cooking_time(day_index)
        if not cheat:
            lookup_target = calorie_target
            if is_5_2_fasting_day(preferences, day_index):
                lookup_target *= FASTING_DAY_MEAL_FACTOR
            reused = self._reuse_recipe(meal_type, lookup_target, used_titles)
            if reused is not None:
                return reused
        avoid = ", ".join(used_titles[-used_limit:]) or "none"
        if cheat:
            calorie_target *= CHEAT_MEAL_FACTOR
            prompt = (
                f"{MEAL_TYPE_GUIDELINES['cheat_meal']}\n"
                f"Create a CHEAT MEAL ({meal_type}) for {day}. Usual dietary constraints are relaxed.\n"
                f"- Target calories: about {round(calorie_target)} kcal\n"
                f"- Allergies to avoid: {preferences.allergies_text()}\n"
                f"- Already on the menu, do not repeat: {', '.join(used_titles) or 'none'}\n"
            )
        else:
            prompt = (
                f"{SIMPLE_RECIPE_GUIDELINES}\n"
                f"{MEAL_TYPE_GUIDELINES.get(meal_type, '')}\n"
                f"{fasting_context(preferences, day_index, calorie_target)}\n"
                f"Create a SIMPLE everyday {meal_type} for {day}.\n"
                f"- Target calories: {round(calorie_target)} kcal\n"
                f"- Diet: {preferences.diet_type or 'balanced'}\n"
                f"- Allergies to avoid: {preferences.allergies_text()}\n"
                f"- Already on the menu, do not repeat: {avoid}\n"
                f"- Maximum preparation time: {max_time} minutes\n"
            )
            if preferences.cooking_skill_level:
                prompt += f"- Cooking skill: {preferences.cooking_skill_level}\n"
        prompt += "Answer ONLY with valid JSON in this format:\n" + MEAL_JSON_FORMAT

        operation = f"meal {meal_type} for {day}"
        payload = await self._complete_json(prompt, operation)
        try:
            generated = GeneratedMeal.model_validate(payload)
        except ValidationError as e:
            raise GenerationFailure(f"{operation}: malformed meal ({e.error_count()} errors)",
                                    operation=operation) from e
        used_titles.append(generated.title)
        meal = Meal(
            type=meal_type,
            name=generated.title,
            description=generated.description,
            calories=generated.macros.calories,
            proteins=generated.macros.proteins,
            carbs=generated.macros.carbs,
            fats=generated.macros.fats,
            prep_time=generated.prep_time,
            is_cheat_meal=cheat,
        )
        meal.recipe_id = self._store_recipe(meal)
        return meal

    async def _generate_day(self, day_index: int, preferences: Preferences, used_titles: List[str],
                            cheat_slot: Tuple[int, str] = (-1, ""),
                            used_limit: int = USED_TITLES_WEEK_LIMIT) -> DayPlan:
        meals: List[Meal] = []
        for meal_type in MEAL_TYPES:
            if skips_meal(preferences, meal_type):
                meals.append(fasting_placeholder(meal_type))
                continue
            cheat = cheat_slot == (day_index, meal_type)
            meals.append(await self._generate_meal(meal_type, day_index, preferences, used_titles,
                                                   cheat=cheat, used_limit=used_limit))
        return DayPlan(day=DAYS[day_index], meals=meals, total_calories=sum(m.calories for m in meals))

    async def generate_weekly_plan(self, preferences: Preferences) -> WeeklyPlan:
        logger.info("Generating weekly meal plan (%s kcal/day)", preferences.daily_calories)
        cheat_slot = pick_cheat_slot(preferences, self.rng)
        if cheat_slot[0] >= 0:
            logger.info("Cheat meal scheduled for %s (%s)", DAYS[cheat_slot[0]], cheat_slot[1])
        used_titles: List[str] = []
        days = []
        for day_index in range(len(DAYS)):
            days.append(await self._generate_day(day_index, preferences, used_titles, cheat_slot))
        return WeeklyPlan(days)

    async def regenerate_day(self, day_index: int, preferences: Preferences, current_plan: WeeklyPlan) -> DayPlan:
        logger.info("Regenerating %s", DAYS[day_index])
        used_titles = current_plan.meal_names(exclude_day=day_index)
        return await self._generate_day(day_index, preferences, used_titles, used_limit=USED_TITLES_DAY_LIMIT)

    # === Recipe details ===
    async def generate_recipe_details(self, meal: Meal) -> RecipeDetails:
        if meal.recipe_id and self.recipes is not None:
            stored = self.recipes.load_details(meal.recipe_id)
            if stored is not None:
                return stored
        operation = f"recipe details for {meal.name}"
        prompt = (
            f"{SIMPLE_RECIPE_GUIDELINES}\n"
            f"Write the full recipe for the {meal.type} '{meal.name}'"
            f"{': ' + meal.description if meal.description else ''}.\n"
            f"- One portion: {meal.calories} kcal, {meal.proteins} g protein, "
            f"{meal.carbs} g carbs, {meal.fats} g fats\n"
            f"- Preparation time: about {meal.prep_time or 20} minutes\n"
            "- Ingredients with quantities, short numbered steps, one or two practical tips\n"
            "Answer ONLY with valid JSON in this format:\n" + RECIPE_DETAILS_JSON_FORMAT
        )
        payload = await self._complete_json(prompt, operation)
        try:
            generated = GeneratedRecipe.model_validate(payload)
        except ValidationError as e:
            raise GenerationFailure(f"{operation}: malformed recipe", operation=operation) from e
        if (len(generated.ingredients) < MIN_RECIPE_INGREDIENTS
                or len(generated.instructions) < MIN_RECIPE_INSTRUCTIONS):
            raise EmptyResult(f"{operation}: too few ingredients or instructions", operation=operation)
        details = RecipeDetails(ingredients=generated.ingredients, instructions=generated.instructions,
                                tips=generated.tips)
        if meal.recipe_id and self.recipes is not None:
            try:
                self.recipes.save_details(meal.recipe_id, details)
            except OSError:
                logger.exception("Failed to store details for recipe %s", meal.recipe_id)
        return details

    # === Shopping list ===
    async def generate_shopping_list(self, plan: WeeklyPlan, weekly_budget: Optional[float] = None,
                                     price_preference: Optional[str] = None) -> ShoppingList:
        operation = "shopping list"
        lines = [f"- {d.day} {m.type}: {m.name}" for d in plan.days for m in d.meals if not m.is_fasting]
        if not lines:
            raise EmptyResult(f"{operation}: plan has no meals", operation=operation)
        prompt = (
            "You are a cooking assistant. Here are the meals planned for one week:\n"
            + "\n".join(lines) + "\n\n"
            "TASK:\n"
            "1. List the ingredients needed for all these meals, one portion each\n"
            "2. Merge similar ingredients (200 g rice + 150 g rice = 350 g rice)\n"
            "3. Group them by category (Fruits & Vegetables, Meat & Fish, Dairy, Groceries, ...)\n"
            "4. Estimate a supermarket price for each item, the subtotal per category and the total\n"
        )
        if weekly_budget is not None:
            prompt += f"5. The weekly budget is {weekly_budget}; add savings tips if the total is above it\n"
        if price_preference:
            prompt += f"- Price tier: {price_preference}\n"
        prompt += "Answer ONLY with valid JSON in this format:\n" + SHOPPING_LIST_JSON_FORMAT

        payload = await self._complete_json(prompt, operation)
        try:
            generated = GeneratedShoppingList.model_validate(payload)
        except ValidationError as e:
            raise GenerationFailure(f"{operation}: malformed shopping list", operation=operation) from e
        return _to_shopping_list(generated)


def _to_shopping_list(generated: GeneratedShoppingList) -> ShoppingList:
    categories = []
    for c in generated.categories:
        items = [ShoppingItem(name=i.name, quantity=i.quantity, price_estimate=i.price_estimate) for i in c.items]
        if not items:
            continue
        subtotal = c.subtotal if c.subtotal is not None else round(sum(i.price_estimate for i in items), 2)
        categories.append(ShoppingCategory(name=c.name, items=items, subtotal=subtotal))
    if not categories:
        raise EmptyResult("shopping list: no items returned", operation="shopping list")
    total = generated.total_estimate
    if total is None:
        total = round(sum(c.subtotal for c in categories), 2)
    return ShoppingList(categories=categories, total_estimate=total, savings_tips=generated.savings_tips)


__all__ = [
    'GenerationGateway', 'OpenAIGenerationGateway',
    'fasting_placeholder', 'is_5_2_fasting_day', 'skips_meal', 'window_start_hour', 'pick_cheat_slot',
]
