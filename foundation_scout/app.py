from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from foundation_scout import services
from foundation_scout.schemas import ErrorOut, HealthOut, ResearchRequest

log = logging.getLogger(__name__)


app = FastAPI(
    title="Foundation Scout",
    version="0.1.0",
    description=(
        "Resolve the charitable foundation behind an organization website and "
        "harvest its upcoming events, registration platforms and development contacts. "
        "All endpoints return JSON. No authentication required."
    ),
    openapi_tags=[
        {"name": "Research", "description": "Run the foundation research pipeline for one URL."},
        {"name": "Admin", "description": "Service health."},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def _invalid_body(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(HTTPException)
async def _http_error(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


# ---------------------------------------------------------------------------
# Routes: Research
# ---------------------------------------------------------------------------


@app.post("/api/research", tags=["Research"],
          summary="Find an organization's foundation, its events, tools and contacts",
          responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}, 502: {"model": ErrorOut}})
async def research(body: ResearchRequest):
    url = body.normalized_url()
    if not url:
        raise HTTPException(400, "URL is required")
    log.info("Researching %s", url)
    result = await services.research(url)
    return JSONResponse(status_code=services.status_code_for(result), content=services.result_payload(result))


# ---------------------------------------------------------------------------
# Routes: Health
# ---------------------------------------------------------------------------


@app.get("/api/health", response_model=HealthOut, tags=["Admin"], summary="Liveness check")
async def health():
    return HealthOut()


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


def main():
    import uvicorn
    uvicorn.run("foundation_scout.app:app", host="127.0.0.1", port=8001)


if __name__ == "__main__":
    main()
