"""Recipe repository: file-backed store of generated recipes, reused by later plans through their recipe id."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from weekplan.domain.Meal import Meal
from weekplan.domain.RecipeDetails import RecipeDetails
from weekplan.infra.paths import RECIPES_FILE
from weekplan.utilities.constants import RECIPE_SEARCH_LIMIT

logger = logging.getLogger(__name__)


class RecipeRepository:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else RECIPES_FILE

    def _load_store(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f) or {}
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in recipes file %s: %s", self.path, e)
            return {}

    def _save_store(self, store: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(store, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _to_meal(recipe_id: str, entry: Dict[str, Any]) -> Meal:
        meal = Meal.from_dict(entry)
        meal.recipe_id = recipe_id
        meal.from_database = True
        return meal

    def save_recipe(self, meal: Meal) -> str:
        """Store the meal's recipe and return its new recipe id."""
        recipe_id = uuid4().hex
        store = self._load_store()
        entry = meal.to_dict()
        for key in ("recipeId", "fromDatabase", "isCheatMeal", "isFasting"):
            entry.pop(key, None)
        entry["createdAt"] = datetime.now(timezone.utc).isoformat()
        store[recipe_id] = entry
        self._save_store(store)
        logger.debug("Recipe saved: %s (%s)", meal.name, recipe_id)
        return recipe_id

    def get(self, recipe_id: str) -> Optional[Meal]:
        entry = self._load_store().get(recipe_id)
        return self._to_meal(recipe_id, entry) if entry else None

    def find(self, meal_type: str, calorie_min: float, calorie_max: float,
             exclude_titles: Iterable[str] = (), limit: int = RECIPE_SEARCH_LIMIT) -> List[Meal]:
        """Stored recipes of `meal_type` whose calories fall in [calorie_min, calorie_max], skipping used titles."""
        excluded = set(exclude_titles)
        found = []
        for recipe_id, entry in self._load_store().items():
            if entry.get("type") != meal_type or entry.get("name") in excluded:
                continue
            if not calorie_min <= (entry.get("calories") or 0) <= calorie_max:
                continue
            found.append(self._to_meal(recipe_id, entry))
            if len(found) >= limit:
                break
        return found

    def save_details(self, recipe_id: str, details: RecipeDetails) -> bool:
        store = self._load_store()
        if recipe_id not in store:
            return False
        store[recipe_id]["details"] = details.to_dict()
        self._save_store(store)
        return True

    def load_details(self, recipe_id: str) -> Optional[RecipeDetails]:
        entry = self._load_store().get(recipe_id) or {}
        details = entry.get("details")
        if not details:
            return None
        return RecipeDetails(
            ingredients=list(details.get("ingredients") or []),
            instructions=list(details.get("instructions") or []),
            tips=list(details.get("tips") or []),
        )


__all__ = ["RecipeRepository"]
