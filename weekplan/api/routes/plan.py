from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from weekplan.infra.Generation_Gateway import OpenAIGenerationGateway
from weekplan.infra.Recipe_Repository import RecipeRepository
from weekplan.logic.reporting.nutrition import compute_week_nutrition
from weekplan.logic.shopping.list_builder import budget_summary
from weekplan.session.Plan_Session import NoPlanError, PlanSession
from weekplan.utilities.errors import RegenerationInProgress, ValidationPrecondition
from weekplan.utilities.validators import (
    MoveMealInput, PreferencesInput, ReorderInput, ShoppingListRequest
)

router = APIRouter(prefix="/api/plan")

_session: Optional[PlanSession] = None


def get_session() -> PlanSession:
    """Process-wide plan session (one plan per running instance)."""
    global _session
    if _session is None:
        _session = PlanSession(OpenAIGenerationGateway(recipes=RecipeRepository()))
    return _session


def _plan_or_404(session: PlanSession) -> Dict[str, Any]:
    try:
        return session.to_dict()
    except NoPlanError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _local(session: PlanSession, action, *args):
    """Run a local mutation and map precondition errors to HTTP codes."""
    try:
        return action(*args)
    except NoPlanError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationPrecondition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegenerationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/generate")
async def generate_plan(preferences: Optional[PreferencesInput] = Body(default=None),
                        session: PlanSession = Depends(get_session)):
    prefs = preferences.to_preferences() if preferences is not None else None
    try:
        result = await session.generate(prefs)
    except RegenerationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error or "Failed to generate weekly plan")
    return _plan_or_404(session)


@router.get("")
def get_plan(session: PlanSession = Depends(get_session)):
    return _plan_or_404(session)


@router.get("/nutrition")
def get_nutrition(session: PlanSession = Depends(get_session)):
    plan = _local(session, session.require_plan)
    return compute_week_nutrition(plan, session.preferences)


@router.post("/days/{day_index}/regenerate")
async def regenerate_day(day_index: int, session: PlanSession = Depends(get_session)):
    try:
        result = await session.regenerate_day(day_index)
    except NoPlanError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationPrecondition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegenerationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error or "Failed to regenerate day")
    return _plan_or_404(session)


@router.delete("/days/{day_index}/meals/{meal_index}")
def delete_meal(day_index: int, meal_index: int, session: PlanSession = Depends(get_session)):
    _local(session, session.delete_meal, day_index, meal_index)
    return _plan_or_404(session)


@router.post("/days/{day_index}/meals/{meal_index}/move")
def move_meal(day_index: int, meal_index: int, payload: MoveMealInput,
              session: PlanSession = Depends(get_session)):
    _local(session, session.move_meal, day_index, meal_index, payload.to_day_index)
    return _plan_or_404(session)


@router.put("/days/{day_index}/order")
def reorder_meals(day_index: int, payload: ReorderInput, session: PlanSession = Depends(get_session)):
    _local(session, session.reorder_meals, day_index, payload.order)
    return _plan_or_404(session)


@router.post("/days/{day_index}/meals/{meal_index}/validate")
def toggle_validation(day_index: int, meal_index: int, session: PlanSession = Depends(get_session)):
    validated = _local(session, session.toggle_validation, day_index, meal_index)
    return {"dayIndex": day_index, "mealIndex": meal_index, "validated": validated,
            "dayFullyValidated": session.is_day_fully_validated(day_index)}


@router.post("/days/{day_index}/validate-all")
def validate_all(day_index: int, session: PlanSession = Depends(get_session)):
    validated = _local(session, session.validate_all_for_day, day_index)
    return {"dayIndex": day_index, "dayFullyValidated": validated}


@router.get("/days/{day_index}/meals/{meal_index}/recipe")
async def recipe_details(day_index: int, meal_index: int, session: PlanSession = Depends(get_session)):
    try:
        details = await session.recipe_details(day_index, meal_index)
    except NoPlanError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationPrecondition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegenerationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return details.to_dict()


@router.post("/shopping-list")
async def shopping_list(payload: Optional[ShoppingListRequest] = Body(default=None),
                        session: PlanSession = Depends(get_session)):
    budget = payload.weekly_budget if payload is not None else None
    try:
        result = await session.shopping_list(budget)
    except NoPlanError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error or "Failed to generate shopping list")
    data = result.value.to_dict()
    data["budget"] = budget_summary(result.value)
    return data


@router.post("/save")
def save_plan(session: PlanSession = Depends(get_session)):
    result = _local(session, session.save)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)
    return {"planId": result.value}
