"""Simple Event Bus / Observer implementation for plan session events.

Event names:
  plan.generated          -> payload {"days": int, "total_calories": int}
  plan.generation_failed  -> payload {"operation": str, "error": str, "day_index": int | None}
  plan.day_regenerated    -> payload {"day_index": int, "cleared_validations": int}
  plan.meal_deleted       -> payload {"day_index": int, "meal_index": int, "name": str}
  plan.meal_moved         -> payload {"from_day": int, "to_day": int, "name": str}
  plan.meals_reordered    -> payload {"day_index": int}
  plan.validation_changed -> payload {"day_index": int, "meal_index": int | None, "validated": bool}
  plan.saved              -> payload {"plan_id": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_GENERATED = "plan.generated"
PLAN_GENERATION_FAILED = "plan.generation_failed"
PLAN_DAY_REGENERATED = "plan.day_regenerated"
PLAN_MEAL_DELETED = "plan.meal_deleted"
PLAN_MEAL_MOVED = "plan.meal_moved"
PLAN_MEALS_REORDERED = "plan.meals_reordered"
PLAN_VALIDATION_CHANGED = "plan.validation_changed"
PLAN_SAVED = "plan.saved"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any = None):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS',
	'PLAN_GENERATED', 'PLAN_GENERATION_FAILED', 'PLAN_DAY_REGENERATED', 'PLAN_MEAL_DELETED',
	'PLAN_MEAL_MOVED', 'PLAN_MEALS_REORDERED', 'PLAN_VALIDATION_CHANGED', 'PLAN_SAVED',
]
