"""Nutrition aggregation over a weekly plan (fasting placeholders are ignored)."""
from collections import defaultdict
from typing import Any, Dict, Optional

from weekplan.domain.Preferences import Preferences
from weekplan.domain.WeeklyPlan import WeeklyPlan


def compute_week_nutrition(plan: WeeklyPlan, preferences: Optional[Preferences] = None) -> Dict[str, Any]:
    """Aggregate nutrition stats for the given week plan.

    Returns structure:
    {
      'days': [
         {'day': 'Monday', 'calories': int, 'proteins': g, 'carbs': g, 'fats': g,
          'meals': int, 'target_delta': int | None},
         ...
      ],
      'week_totals': {'calories': int, 'proteins': g, 'carbs': g, 'fats': g},
      'daily_average': {'calories': int, 'proteins': g, 'carbs': g, 'fats': g}
    }
    """
    days_result = []
    totals = defaultdict(int)
    for day in plan.days:
        eaten = [m for m in day.meals if not m.is_fasting]
        day_stats = {
            'calories': sum(m.calories for m in eaten),
            'proteins': sum(m.proteins for m in eaten),
            'carbs': sum(m.carbs for m in eaten),
            'fats': sum(m.fats for m in eaten),
        }
        for k, v in day_stats.items():
            totals[k] += v
        days_result.append({
            'day': day.day,
            **day_stats,
            'meals': len(eaten),
            'target_delta': day_stats['calories'] - preferences.daily_calories if preferences else None,
        })

    n = len(plan.days) or 1
    keys = ('calories', 'proteins', 'carbs', 'fats')
    return {
        'days': days_result,
        'week_totals': {k: totals[k] for k in keys},
        'daily_average': {k: round(totals[k] / n) for k in keys},
    }


__all__ = ["compute_week_nutrition"]
