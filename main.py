import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.collection import Collection

from database import (
    close_client,
    database_name,
    ensure_indexes,
    get_db,
    get_scores_collection,
    resolve_database_url,
)
from errors import InfrastructureError, LeaderboardError, MethodNotAllowedError, ValidationError
from i18n import translate
from leaderboard import get_top, submit_score
from schemas import LeaderboardEntry, ScoreSubmission

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if resolve_database_url():
        try:
            ensure_indexes(get_scores_collection())
        except InfrastructureError:
            logger.warning("Database not configured, skipping index creation")
    else:
        logger.warning("No database URL configured")
    yield
    close_client()


app = FastAPI(title="Trivia Leaderboard API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LeaderboardError)
async def leaderboard_error_handler(request: Request, exc: LeaderboardError):
    lang = request.query_params.get("lang")
    return JSONResponse(status_code=exc.status_code, content={"detail": translate(exc.key, lang)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Missing, unparsable or non-object bodies never reach the leaderboard
    return await leaderboard_error_handler(request, ValidationError("params_missing"))


# ----------------------
# Routes
# ----------------------
@app.get("/")
def read_root():
    return {"message": "Trivia leaderboard running"}


@app.post("/score", response_model=List[LeaderboardEntry])
def post_score(payload: ScoreSubmission, collection: Collection = Depends(get_scores_collection)):
    return submit_score(collection, payload)


@app.api_route("/score", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def score_method_not_allowed():
    raise MethodNotAllowedError("method_not_allowed")


@app.get("/leaderboard", response_model=List[LeaderboardEntry])
def read_leaderboard(
    difficulty: Optional[str] = None,
    collection: Collection = Depends(get_scores_collection),
):
    return get_top(collection, difficulty)


@app.get("/health")
def health():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if resolve_database_url() else "❌ Not Set",
        "database_name": database_name(),
        "connection_status": "Not Connected",
    }

    try:
        get_db().command("ping")
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except InfrastructureError:
        response["database"] = "⚠️  Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"

    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
