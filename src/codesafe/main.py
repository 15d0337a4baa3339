"""FastAPI application for the CodeSafe scanner."""

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .analyzer import analyze_upload
from .config import ConfigError, Settings
from .enhancer import CodeEnhancer
from .history import HistoryError, HistoryStore
from .llm import EnhancementError
from .models import (
    EnhanceRequest,
    EnhanceResponse,
    HistoryEntry,
    ScanRequest,
    ScanResponse,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_history_store() -> HistoryStore:
    return get_settings().history_store()


def get_enhancer(settings: Settings = Depends(get_settings)) -> CodeEnhancer:
    """Build the enhancer, or answer 503 when it is not configured."""
    try:
        return CodeEnhancer(settings.enhancer_config())
    except ConfigError as e:
        logger.error(f"Enhancement unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))


app = FastAPI(
    title="CodeSafe Scanner",
    description="Rule-based vulnerability scanning for JavaScript/TypeScript, Python and Java files",
    version="0.1.0",
)

# CORS - allow common development origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/scan", response_model=ScanResponse)
async def scan(
    request: ScanRequest,
    history: HistoryStore = Depends(get_history_store),
) -> ScanResponse:
    """
    Scan a single file for vulnerability patterns.

    - **code**: Full text of the file
    - **filename**: File name; its extension selects the rule set
    - **severities**: Optional subset of high/medium/low to return
    - **save_history**: Whether to record the findings in history
    """
    try:
        result = analyze_upload(request.code, request.filename, request.severities)
    except Exception as e:
        logger.error(f"Scan failed: {e}")
        raise HTTPException(status_code=500, detail=f"Scan failed: {str(e)}")

    logger.info(
        f"Scanned {request.filename} (ext: {result.extension or 'none'}): "
        f"{result.summary.total} findings"
    )

    if request.save_history:
        try:
            history.save(request.filename, result.findings)
        except HistoryError as e:
            # Findings are still returned when history cannot be written.
            logger.error(f"Failed to save history for {request.filename}: {e}")

    return result


@app.post("/enhance", response_model=EnhanceResponse)
async def enhance(
    request: EnhanceRequest,
    enhancer: CodeEnhancer = Depends(get_enhancer),
) -> EnhanceResponse:
    """
    Rewrite code with the configured model, using findings as context.

    - **code**: Original code
    - **filename**: Original file name
    - **findings**: Findings from a previous scan
    """
    try:
        enhanced = await enhancer.enhance(request.code, request.filename, request.findings)
    except EnhancementError as e:
        logger.error(f"Enhancement failed for {request.filename}: {e}")
        raise HTTPException(status_code=502, detail=f"Enhancement failed: {str(e)}")

    return EnhanceResponse(filename=request.filename, enhanced_code=enhanced)


@app.get("/history", response_model=list[HistoryEntry])
async def history(store: HistoryStore = Depends(get_history_store)) -> list[HistoryEntry]:
    """List saved scans, newest first."""
    try:
        return store.list()
    except HistoryError as e:
        logger.error(f"Failed to read history: {e}")
        raise HTTPException(status_code=500, detail=str(e))
