from fastapi import FastAPI
import logging

from weekplan.api.routes import plan
from weekplan.utilities.config import DEBUG

# Logging
logger = logging.getLogger("weekplan_app")

# Initialize FastAPI app
app = FastAPI(title="Weekly Meal Plan API", debug=DEBUG)

# Include routers
app.include_router(plan.router)


@app.get("/health")
def health():
    return {"status": "ok"}
