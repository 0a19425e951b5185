import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError
import uvicorn
from config import config, logger
from xss_guard import CATALOG_VERSION, PolicySanitizer, XssDefender

# Track app start time
app_start_time = datetime.now()

# Engine bootstrapped from environment overrides
defender = XssDefender(config.sanitization_overrides())


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Application starting up...")
        logger.info(f"Sanitizer configuration: {defender.get_config().model_dump(by_alias=True)}")
        yield
    finally:
        logger.info("Application shutting down...")

# Initialize FastAPI app
app = FastAPI(
    title="XSS Guard",
    description="Allow-list HTML/text sanitization service",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error on {request.url}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation error", "errors": exc.errors()}
    )

# Pydantic models
class SanitizeRequest(BaseModel):
    value: Optional[str] = Field(None, description="Untrusted string")
    config: Optional[Dict[str, Any]] = Field(None, description="Per-request configuration overrides")

class SanitizeResponse(BaseModel):
    status: str
    sanitized: str
    changed: bool
    timestamp: str
    request_id: str

class SanitizeObjectRequest(BaseModel):
    data: Any = None
    config: Optional[Dict[str, Any]] = None

class CheckRequest(BaseModel):
    value: Optional[str] = None

class CheckResponse(BaseModel):
    status: str
    has_xss_risks: bool
    patterns: List[str]
    timestamp: str

class PolicyRequest(BaseModel):
    value: Optional[str] = None
    options: Optional[Dict[str, Any]] = None

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    catalog_version: str
    uptime: str


def _engine_for(overrides: Optional[Dict[str, Any]]) -> XssDefender:
    """Per-request engine; invalid overrides become a 422"""
    if not overrides:
        return defender
    try:
        return defender.derive(overrides)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))


# Routes
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    uptime = str(datetime.now() - app_start_time)
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version="1.0.0",
        catalog_version=CATALOG_VERSION,
        uptime=uptime
    )

@app.post("/sanitize", response_model=SanitizeResponse)
async def sanitize(request: SanitizeRequest):
    """Sanitize a single string"""
    request_id = str(uuid.uuid4())
    engine = _engine_for(request.config)

    sanitized = engine.sanitize_string(request.value)
    changed = sanitized != (request.value or "")
    if changed:
        logger.info(f"Sanitize request {request_id} modified input")

    return SanitizeResponse(
        status="success",
        sanitized=sanitized,
        changed=changed,
        timestamp=datetime.now().isoformat(),
        request_id=request_id
    )

@app.post("/sanitize/object")
async def sanitize_object(request: SanitizeObjectRequest):
    """Recursively sanitize every string in a JSON document"""
    request_id = str(uuid.uuid4())
    engine = _engine_for(request.config)
    return {
        "status": "success",
        "data": engine.sanitize_object(request.data),
        "timestamp": datetime.now().isoformat(),
        "request_id": request_id
    }

@app.post("/check", response_model=CheckResponse)
async def check(request: CheckRequest):
    """Report which catalog patterns the value matches"""
    return CheckResponse(
        status="success",
        has_xss_risks=defender.has_xss_risks(request.value),
        patterns=defender.detector.find(request.value),
        timestamp=datetime.now().isoformat()
    )

@app.get("/check/url")
async def check_url(request: Request):
    """Check this request's own query parameters"""
    params: Dict[str, List[str]] = {}
    for key, value in request.query_params.multi_items():
        params.setdefault(key, []).append(value)

    report = defender.check_url_params(params)
    if not report.is_safe:
        logger.warning(f"Unsafe query parameters on {request.url.path}: {[issue.key for issue in report.issues]}")
    return {
        "status": "success",
        **report.model_dump(),
        "timestamp": datetime.now().isoformat()
    }

@app.get("/config")
async def get_config():
    """Current sanitizer configuration"""
    return defender.get_config().model_dump(by_alias=True)

@app.patch("/config")
async def update_config(overrides: Dict[str, Any]):
    """Merge a partial configuration into the running sanitizer"""
    try:
        defender.set_config(overrides)
    except ValidationError as e:
        logger.error(f"Rejected configuration update: {e.errors(include_url=False)}")
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return defender.get_config().model_dump(by_alias=True)

@app.post("/policy/sanitize")
async def policy_sanitize(request: PolicyRequest):
    """Sanitize with the level based policy sanitizer"""
    policy = PolicySanitizer()
    try:
        if request.options:
            policy.configure(**request.options)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    sanitized = policy.sanitize(request.value)
    return {
        "status": "success",
        "sanitized": sanitized,
        "threat_detected": policy.detect_threat(request.value),
        "options": policy.describe(),
        "timestamp": datetime.now().isoformat()
    }

# Error handlers
@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    return JSONResponse(
        status_code=404,
        content={"error": "Endpoint not found", "path": str(request.url)}
    )

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.error(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )

if __name__ == "__main__":
    print(f"Starting XSS Guard API on {config.HOST}:{config.PORT}")
    print(f"Debug mode: {config.DEBUG}")
    logger.info(f"Sanitizer overrides from environment: {config.sanitization_overrides()}")

    uvicorn.run(
        "app:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower()
    )
