"""Plan repository: file-backed store of lightweight plan snapshots kept for feedback collection."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from weekplan.domain.Preferences import Preferences
from weekplan.infra.paths import PLANS_FILE

logger = logging.getLogger(__name__)


class PlanRepository:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else PLANS_FILE

    def _load_store(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f) or {}
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in plans file %s: %s", self.path, e)
            return {}

    def _save_store(self, store: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(store, f, indent=2, ensure_ascii=False)

    def persist_plan(self, snapshot: Dict[str, Any], preferences: Optional[Preferences] = None) -> str:
        """Store a snapshot (see logic.plan.totals.to_snapshot) and return its plan id."""
        plan_id = uuid4().hex
        store = self._load_store()
        entry = {
            "savedAt": datetime.now(timezone.utc).isoformat(),
            "plan": snapshot,
        }
        if preferences is not None:
            entry["targetCalories"] = preferences.daily_calories
            entry["dietType"] = preferences.diet_type
            entry["userGoal"] = preferences.goals
        store[plan_id] = entry
        self._save_store(store)
        logger.info("Meal plan saved: %s", plan_id)
        return plan_id

    def load_snapshot(self, plan_id: str) -> Optional[Dict[str, Any]]:
        entry = self._load_store().get(plan_id)
        return entry.get("plan") if entry else None

    def list_plans(self) -> List[Dict[str, Any]]:
        """Saved plans, newest first: [{id, savedAt, targetCalories, dietType}]."""
        items = [
            {
                "id": plan_id,
                "savedAt": entry.get("savedAt"),
                "targetCalories": entry.get("targetCalories"),
                "dietType": entry.get("dietType"),
            }
            for plan_id, entry in self._load_store().items()
        ]
        items.sort(key=lambda x: x["savedAt"] or "", reverse=True)
        return items
