import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .aggregation import aggregate_votes
from .catalog import load_catalog
from .errors import MethodNotAllowedError, ValidationError, VoteStoreError
from .logging_setup import setup_logging
from .models import SubmitAck, VoteIn
from .service import list_votes, submit_vote
from .store import GitHubVoteStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    logger.info(f"Vote store: {config.GITHUB_REPO}/{config.VOTES_FILE_PATH}")
    if not config.GITHUB_TOKEN:
        logger.warning("GITHUB_TOKEN is not set; vote endpoints will answer 500")
    yield


app = FastAPI(title="Idea Vote API", lifespan=lifespan)

catalog = load_catalog()


def get_store() -> GitHubVoteStore:
    # the token is checked on use so a missing credential fails each request
    return GitHubVoteStore(
        token=config.GITHUB_TOKEN,
        repo=config.GITHUB_REPO,
        path=config.VOTES_FILE_PATH,
        api_url=config.GITHUB_API_URL,
        timeout=config.REQUEST_TIMEOUT,
    )


# ----------- error shape: {error, details?} -----------

@app.exception_handler(VoteStoreError)
async def vote_store_error_handler(request: Request, exc: VoteStoreError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    err = ValidationError("Invalid request body", jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=err.status_code, content=err.to_body())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        body = MethodNotAllowedError().to_body()
    else:
        body = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


# ----------- API -----------

@app.post("/api/save-vote")
async def save_vote(v: VoteIn, store: GitHubVoteStore = Depends(get_store)) -> SubmitAck:
    return await submit_vote(store, v, max_attempts=config.SUBMIT_MAX_ATTEMPTS)


@app.get("/api/get-votes")
async def get_votes(store: GitHubVoteStore = Depends(get_store)):
    return await list_votes(store)


@app.get("/api/results")
async def get_results(store: GitHubVoteStore = Depends(get_store)):
    records = await list_votes(store)
    return [t.model_dump(mode="json") for t in aggregate_votes(records)]


@app.get("/api/ideas")
def get_ideas():
    return [idea.model_dump(mode="json", exclude_none=True) for idea in catalog]
