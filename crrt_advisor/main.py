"""
CRRT Circuit Advisor - FastAPI Application

API endpoints for:
- Circuit sessions (parameters, derived quantities, risks)
- Pressure and clinical advisories
- Diagram parts and click-to-ask explanations
- Free-text chat with the explanation service
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict
import uuid

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crrt_advisor import __version__, config
from crrt_advisor.core import CITRATE_DOSE_PRESETS, PARAMETER_SPECS, CircuitSession
from crrt_advisor.models import (
    AdvisoriesResponse,
    ChatRequest,
    ChatResponse,
    CitrateDoseRequest,
    HealthResponse,
    ParameterBatchUpdate,
    ParameterUpdate,
    PartActivation,
    SessionCreated,
)
from crrt_advisor.services.explainer import (
    RETRY_MESSAGE,
    SUGGESTED_QUESTIONS,
    WELCOME_MESSAGE,
    AdvisoryExplainer,
)
from crrt_advisor.utils import (
    AdvisoryServiceError,
    CRRTAdvisorError,
    ParameterValidationError,
    UnknownPartError,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
    logger.info("CRRT Circuit Advisor API ready to accept requests")
    yield
    _sessions.clear()
    logger.info("CRRT Circuit Advisor API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="CRRT Circuit Advisor API",
    description=(
        "Educational CRRT circuit model with clotting-risk advisories. \n\n"
        "**WARNING**: Teaching tool only. Not a medical device and not a substitute "
        "for clinical judgment."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- In-memory sessions (never persisted) ----
_sessions: Dict[str, CircuitSession] = {}
START_TIME = datetime.now()

_explainer = None


def get_explainer() -> AdvisoryExplainer:
    global _explainer
    if _explainer is None:
        _explainer = AdvisoryExplainer()
    return _explainer


def _get_session(session_id: str) -> CircuitSession:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return session


# ---- Error Handlers ----

@app.exception_handler(ParameterValidationError)
async def parameter_error_handler(request: Request, exc: ParameterValidationError):
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(UnknownPartError)
async def unknown_part_handler(request: Request, exc: UnknownPartError):
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(AdvisoryServiceError)
async def advisory_service_handler(request: Request, exc: AdvisoryServiceError):
    logger.warning(f"Explanation service failure: {exc.message}")
    body = exc.to_dict()
    body["user_message"] = RETRY_MESSAGE
    return JSONResponse(status_code=503, content=body)


@app.exception_handler(CRRTAdvisorError)
async def advisor_error_handler(request: Request, exc: CRRTAdvisorError):
    return JSONResponse(status_code=500, content=exc.to_dict())


# ---- Health ----

def _health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        active_sessions=len(_sessions),
        explanations_available=bool(config.GEMINI_API_KEY),
    )


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return _health()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return _health()


# ---- Parameter metadata ----

@app.get("/api/v1/parameters", tags=["Circuit"])
async def list_parameters():
    """Parameter names, units, defaults and input hints."""
    return {
        "parameters": [spec.to_dict() for spec in PARAMETER_SPECS.values()],
        "citrate_dose_presets": CITRATE_DOSE_PRESETS,
    }


# ---- Sessions ----

@app.post("/api/v1/sessions", response_model=SessionCreated, status_code=201, tags=["Circuit"])
async def create_session():
    """Start a circuit with default parameters."""
    session_id = str(uuid.uuid4())
    session = CircuitSession()
    _sessions[session_id] = session
    logger.info("Created circuit session", extra={"session_id": session_id})
    return SessionCreated(session_id=session_id, version=session.version)


@app.get("/api/v1/sessions/{session_id}", tags=["Circuit"])
async def get_session(session_id: str) -> Dict[str, Any]:
    """Full snapshot: parameters, derived quantities, risks, advisories, parts."""
    return _get_session(session_id).snapshot()


@app.delete("/api/v1/sessions/{session_id}", status_code=204, tags=["Circuit"])
async def delete_session(session_id: str):
    _get_session(session_id)
    del _sessions[session_id]
    logger.info("Deleted circuit session", extra={"session_id": session_id})


@app.patch("/api/v1/sessions/{session_id}/parameters", tags=["Circuit"])
async def update_parameter(session_id: str, update: ParameterUpdate) -> Dict[str, Any]:
    """Set one parameter and return the recomputed snapshot."""
    session = _get_session(session_id)
    session.set_parameter(update.field, update.value)
    return session.snapshot()


@app.put("/api/v1/sessions/{session_id}/parameters", tags=["Circuit"])
async def update_parameters(session_id: str, update: ParameterBatchUpdate) -> Dict[str, Any]:
    """Set several parameters in one recomputation."""
    session = _get_session(session_id)
    session.set_parameters(update.values)
    return session.snapshot()


@app.post("/api/v1/sessions/{session_id}/citrate-dose", tags=["Circuit"])
async def set_citrate_dose(session_id: str, request: CitrateDoseRequest) -> Dict[str, Any]:
    """Set the citrate pump rate from a target dose (mmol/L blood)."""
    session = _get_session(session_id)
    session.set_citrate_dose(request.target_dose)
    return session.snapshot()


@app.get("/api/v1/sessions/{session_id}/advisories", response_model=AdvisoriesResponse, tags=["Advisories"])
async def get_advisories(session_id: str):
    return AdvisoriesResponse(**_get_session(session_id).get_advisories())


@app.get("/api/v1/sessions/{session_id}/parts", tags=["Diagram"])
async def get_parts(session_id: str) -> Dict[str, Any]:
    session = _get_session(session_id)
    return {
        "version": session.version,
        "parts": [p.to_dict() for p in session.get_diagram_parts()],
    }


@app.post(
    "/api/v1/sessions/{session_id}/parts/{identifier}/activate",
    response_model=PartActivation,
    tags=["Diagram"],
)
async def activate_part(
    session_id: str,
    identifier: str,
    explain: bool = Query(False, description="Also fetch the narrative answer"),
    explainer: AdvisoryExplainer = Depends(get_explainer),
):
    """Resolve a clicked part to its question, optionally answering it."""
    session = _get_session(session_id)
    if not explain:
        return PartActivation(
            identifier=identifier,
            query=session.on_part_activated(identifier),
            version=session.version,
        )

    result = await explainer.explain_part(session, identifier)
    return PartActivation(**result.to_dict())


# ---- Chat ----

@app.get("/api/v1/chat/suggestions", tags=["Chat"])
async def chat_suggestions():
    return {"welcome": WELCOME_MESSAGE, "suggestions": SUGGESTED_QUESTIONS}


@app.post("/api/v1/chat", response_model=ChatResponse, tags=["Chat"])
async def chat(request: ChatRequest, explainer: AdvisoryExplainer = Depends(get_explainer)):
    """Free-text question to the explanation service."""
    text = await explainer.explain_query(request.query)
    return ChatResponse(query=request.query, text=text)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("crrt_advisor.main:app", host="0.0.0.0", port=8000, reload=True)
