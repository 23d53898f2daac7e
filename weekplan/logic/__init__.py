"""Core business logic layer.

Subpackages:
- plan: totals, local mutations (delete/move/reorder) and day regeneration
- validation: per-meal confirmation tracking
- recipes: recipe detail cache and local fallback recipe
- shopping: shopping list orchestration and budget reconciliation
- reporting: nutrition aggregates
"""
__all__ = ["plan", "validation", "recipes", "shopping", "reporting"]
