import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, List

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paperpilot import __version__
from paperpilot.agents import assistant
from paperpilot.api.rate_limit import RateLimiter, enforce_rate_limit
from paperpilot.config import Config
from paperpilot.errors import PaperPilotError, from_completion_failure
from paperpilot.llm.base import CompletionFailure, LLMClient
from paperpilot.orchestrator import ReviewOrchestrator
from paperpilot.schemas import (
    CitationsBatchRequest,
    CiteRequest,
    FormatReferenceRequest,
    FormatRequest,
    TermRequest,
)

logger = logging.getLogger(__name__)

analyze = APIRouter(prefix="/analyze", dependencies=[Depends(enforce_rate_limit)])


@contextmanager
def upstream_errors(message: str):
    """Report completion failures with `message` as the generic error text."""
    try:
        yield
    except CompletionFailure as e:
        raise from_completion_failure(e, message) from e


def _llm(request: Request) -> LLMClient:
    return request.app.state.llm


@analyze.post("/term")
def analyze_term(body: TermRequest, request: Request):
    with upstream_errors("Failed to analyze term"):
        result = assistant.check_term(body, _llm(request))
    return result.model_dump(by_alias=True)


@analyze.post("/citations-batch")
def analyze_citations_batch(body: CitationsBatchRequest, request: Request) -> List[dict]:
    config: Config = request.app.state.config
    started = time.monotonic()
    with upstream_errors("Failed to analyze citations batch"):
        suggestions = assistant.analyze_citations(body, _llm(request), config.max_citation_candidates)
    logger.info("Citation batch finished in %.0fms", (time.monotonic() - started) * 1000)
    return [s.model_dump() for s in suggestions]


@analyze.post("/format")
def analyze_format(body: FormatRequest, request: Request):
    with upstream_errors("Failed to parse format"):
        result = assistant.parse_caption(body, _llm(request))
    return result.model_dump()


@analyze.post("/format-reference")
def analyze_format_reference(body: FormatReferenceRequest, request: Request):
    with upstream_errors("Failed to format reference"):
        result = assistant.format_reference(body, _llm(request))
    return result.model_dump()


@analyze.post("/cite")
def analyze_cite(body: CiteRequest, request: Request):
    with upstream_errors("Failed to classify sentence"):
        result = assistant.classify_citation_need(body, _llm(request))
    return result.model_dump()


@analyze.post("/review-paper")
def review_paper(request: Request, payload: Any = Body(None)):
    orchestrator: ReviewOrchestrator = request.app.state.orchestrator
    outcome = orchestrator.review(payload)
    return outcome.to_response()


def health():
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return {"status": "ok", "timestamp": timestamp}


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location or 'body'}: {error.get('msg')}")
    return "; ".join(parts)


def install_error_handlers(app: FastAPI) -> None:
    """Every error response is JSON with an `error` field and, when known, `details`."""

    @app.exception_handler(PaperPilotError)
    async def paperpilot_error(request: Request, exc: PaperPilotError):
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={
            "error": "Invalid request body",
            "details": _format_validation_errors(exc),
        })

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


def create_app(config: Config = None, llm: LLMClient = None) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        config: Runtime settings (defaults to Config.from_env())
        llm: Completion client shared by all requests; built from config when omitted
    """
    config = config or Config.from_env()
    if llm is None:
        llm = LLMClient(model_name=config.model_name, timeout=config.timeout)

    app = FastAPI(title="PaperPilot", version=__version__)
    app.state.config = config
    app.state.llm = llm
    app.state.orchestrator = ReviewOrchestrator(llm, config)
    app.state.rate_limiter = RateLimiter(config.rate_limit, config.rate_window)

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        logger.info("%s %s %d %.0fms", request.method, request.url.path, response.status_code,
                    (time.monotonic() - started) * 1000)
        return response

    install_error_handlers(app)
    app.include_router(analyze)
    app.add_api_route("/health", health, methods=["GET"])
    return app
