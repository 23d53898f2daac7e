from weekplan.utilities.config import DATA_DIR

# Centralized paths for data files (single source of truth)
PLANS_FILE = DATA_DIR / 'plans.json'
RECIPES_FILE = DATA_DIR / 'recipes.json'
AI_LAST_RAW_FILE = DATA_DIR / 'ai_last_raw.txt'
AI_LAST_FIXED_FILE = DATA_DIR / 'ai_last_fixed.txt'

__all__ = ['DATA_DIR', 'PLANS_FILE', 'RECIPES_FILE', 'AI_LAST_RAW_FILE', 'AI_LAST_FIXED_FILE']
