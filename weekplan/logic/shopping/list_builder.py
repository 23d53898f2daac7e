"""Shopping list builder.

Categorization and pricing come from the generation gateway (prices are
estimates, not catalog lookups). This module orchestrates the call and
reconciles the estimate with the weekly budget.
"""
import logging
from typing import Any, Dict, Optional

from weekplan.domain.Result import Result
from weekplan.domain.ShoppingList import ShoppingList
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.utilities.errors import EmptyResult, GenerationFailure

logger = logging.getLogger(__name__)


def budget_delta(total_estimate: float, weekly_budget: Optional[float]) -> Optional[float]:
    """total_estimate - weekly_budget (positive = over budget), None without a budget."""
    if weekly_budget is None:
        return None
    return round(float(total_estimate) - float(weekly_budget), 2)


async def build_shopping_list(plan: WeeklyPlan, gateway, weekly_budget: Optional[float] = None,
                              *, price_preference: Optional[str] = None) -> Result:
    """Build a fresh shopping list for `plan` and compare it with `weekly_budget`.

    Returns:
        Result whose value is a ShoppingList with `budget_delta` set when a budget was given.
    """
    try:
        shopping_list = await gateway.generate_shopping_list(plan, weekly_budget, price_preference)
    except GenerationFailure as e:
        logger.warning("Shopping list generation failed: %s", e)
        return Result.failure(str(e))
    except Exception as e:
        logger.exception("Unexpected error generating the shopping list")
        return Result.failure(f"Generation failed: {e}")

    if shopping_list is None or not shopping_list.categories or shopping_list.item_count() == 0:
        return Result.failure(str(EmptyResult("Shopping list has no items")))

    shopping_list.weekly_budget = weekly_budget
    shopping_list.budget_delta = budget_delta(shopping_list.total_estimate, weekly_budget)
    logger.info("Shopping list built: %s items, estimate %.2f, delta %s",
                shopping_list.item_count(), shopping_list.total_estimate, shopping_list.budget_delta)
    return Result.success(shopping_list)


def is_over_budget(shopping_list: ShoppingList) -> bool:
    return shopping_list.budget_delta is not None and shopping_list.budget_delta > 0


def budget_summary(shopping_list: ShoppingList) -> Dict[str, Any]:
    """Display-ready budget reconciliation."""
    delta = shopping_list.budget_delta
    if delta is None:
        status = "no_budget"
    elif delta > 0:
        status = "over"
    elif delta < 0:
        status = "under"
    else:
        status = "on_budget"
    return {
        "totalEstimate": shopping_list.total_estimate,
        "weeklyBudget": shopping_list.weekly_budget,
        "delta": delta,
        "status": status,
    }


__all__ = ["build_shopping_list", "budget_delta", "is_over_budget", "budget_summary"]
