"""
Input validation schemas using Pydantic: client preferences, model output payloads and HTTP bodies.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional

from weekplan.domain.Preferences import FastingSchedule, Preferences

FastingType = Literal["none", "16_8", "18_6", "20_4", "5_2", "eat_stop_eat"]
PricePreference = Literal["budget", "moderate", "premium"]


class FastingScheduleInput(BaseModel):
    """Schema for an intermittent fasting schedule."""
    model_config = ConfigDict(populate_by_name=True)

    type: FastingType = "none"
    eating_window_start: Optional[str] = Field(None, alias="eatingWindowStart", pattern=r"^\d{1,2}(:\d{2})?$")
    eating_window_end: Optional[str] = Field(None, alias="eatingWindowEnd", pattern=r"^\d{1,2}(:\d{2})?$")


class PreferencesInput(BaseModel):
    """Schema for the preference profile sent by the client."""
    model_config = ConfigDict(populate_by_name=True)

    daily_calories: int = Field(2000, alias="dailyCalories", ge=800, le=6000)
    proteins: int = Field(75, ge=0, le=500)
    carbs: int = Field(250, ge=0, le=1000)
    fats: int = Field(65, ge=0, le=300)
    diet_type: Optional[str] = Field(None, alias="dietType", max_length=50)
    allergies: List[str] = Field(default_factory=list)
    goals: Optional[str] = None
    include_cheat_meal: bool = Field(False, alias="includeCheatMeal")
    cooking_skill_level: Optional[str] = Field(None, alias="cookingSkillLevel")
    cooking_time_weekday: Optional[int] = Field(None, alias="cookingTimeWeekday", ge=5, le=240)
    cooking_time_weekend: Optional[int] = Field(None, alias="cookingTimeWeekend", ge=5, le=240)
    fasting_schedule: Optional[FastingScheduleInput] = Field(None, alias="fastingSchedule")
    weekly_budget: Optional[float] = Field(None, alias="weeklyBudget", gt=0)
    price_preference: Optional[PricePreference] = Field(None, alias="pricePreference")

    @field_validator('allergies')
    @classmethod
    def validate_allergies(cls, v):
        """Drop empty entries and surrounding whitespace."""
        return [a.strip() for a in v if a and a.strip()]

    def to_preferences(self) -> Preferences:
        fasting = None
        if self.fasting_schedule is not None:
            fasting = FastingSchedule(
                type=self.fasting_schedule.type,
                eating_window_start=self.fasting_schedule.eating_window_start,
                eating_window_end=self.fasting_schedule.eating_window_end,
            )
        return Preferences(
            daily_calories=self.daily_calories,
            proteins=self.proteins,
            carbs=self.carbs,
            fats=self.fats,
            diet_type=self.diet_type,
            allergies=tuple(self.allergies),
            goals=self.goals,
            include_cheat_meal=self.include_cheat_meal,
            cooking_skill_level=self.cooking_skill_level,
            cooking_time_weekday=self.cooking_time_weekday,
            cooking_time_weekend=self.cooking_time_weekend,
            fasting_schedule=fasting,
            weekly_budget=self.weekly_budget,
            price_preference=self.price_preference,
        )


# --- Model output payloads ---------------------------------------------------

class GeneratedMacros(BaseModel):
    calories: int = Field(..., ge=0)
    proteins: int = Field(0, ge=0)
    carbs: int = Field(0, ge=0)
    fats: int = Field(0, ge=0)


class GeneratedMeal(BaseModel):
    """One meal as returned by the model."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    macros: GeneratedMacros
    prep_time: int = Field(0, alias="prepTime", ge=0)

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        if not v.strip():
            raise ValueError('Meal title cannot be empty')
        return v.strip()


class GeneratedRecipe(BaseModel):
    """Recipe details as returned by the model."""
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)

    @field_validator('ingredients', 'instructions', 'tips')
    @classmethod
    def drop_blank(cls, v):
        """Filter out empty entries."""
        return [s.strip() for s in v if s and s.strip()]


class GeneratedShoppingItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    quantity: str = ""
    price_estimate: float = Field(0.0, alias="priceEstimate", ge=0)

    @field_validator('quantity', mode='before')
    @classmethod
    def quantity_as_text(cls, v):
        return "" if v is None else str(v)


class GeneratedShoppingCategory(BaseModel):
    name: str = Field(..., min_length=1)
    items: List[GeneratedShoppingItem] = Field(default_factory=list)
    subtotal: Optional[float] = Field(None, ge=0)


class GeneratedShoppingList(BaseModel):
    """Shopping list as returned by the model."""
    model_config = ConfigDict(populate_by_name=True)

    categories: List[GeneratedShoppingCategory] = Field(default_factory=list)
    total_estimate: Optional[float] = Field(None, alias="totalEstimate", ge=0)
    savings_tips: List[str] = Field(default_factory=list, alias="savingsTips")


# --- HTTP bodies ---------------------------------------------------------------

class MoveMealInput(BaseModel):
    """Schema for moving a meal to another day."""
    model_config = ConfigDict(populate_by_name=True)

    to_day_index: int = Field(..., alias="toDayIndex", ge=0, le=6)


class ReorderInput(BaseModel):
    """Schema for a drag-and-drop reorder: the new order as a permutation of current positions."""
    order: List[int] = Field(..., min_length=1)


class ShoppingListRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    weekly_budget: Optional[float] = Field(None, alias="weeklyBudget", gt=0)
