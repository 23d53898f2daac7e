"""ShoppingList aggregate: categorized, priced items for a week plus the budget reconciliation."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ShoppingItem:
    name: str
    quantity: str = ""
    price_estimate: float = 0.0

    def to_dict(self):
        return {"name": self.name, "quantity": self.quantity, "priceEstimate": self.price_estimate}


@dataclass
class ShoppingCategory:
    name: str
    items: List[ShoppingItem] = field(default_factory=list)
    subtotal: float = 0.0

    def to_dict(self):
        return {
            "name": self.name,
            "items": [i.to_dict() for i in self.items],
            "subtotal": self.subtotal,
        }


@dataclass
class ShoppingList:
    categories: List[ShoppingCategory] = field(default_factory=list)
    total_estimate: float = 0.0
    savings_tips: List[str] = field(default_factory=list)
    weekly_budget: Optional[float] = None
    # total_estimate - weekly_budget; positive means over budget
    budget_delta: Optional[float] = None

    def item_count(self) -> int:
        return sum(len(c.items) for c in self.categories)

    def __str__(self) -> str:
        return f"Shopping List ({len(self.categories)} categories, {self.item_count()} items, ~{self.total_estimate})"

    __repr__ = __str__

    def to_dict(self):
        return {
            "categories": [c.to_dict() for c in self.categories],
            "totalEstimate": self.total_estimate,
            "savingsTips": list(self.savings_tips),
            "weeklyBudget": self.weekly_budget,
            "budgetDelta": self.budget_delta,
        }
