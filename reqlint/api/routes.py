"""
API routes — thin HTTP layer that delegates to the lint runner.

Routes:
  GET  /health       → API health check
  POST /api/lint     → Lint a set of documents, return a LintReport
  POST /api/index    → Requirement index for a set of documents
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from reqlint.config import get_settings
from reqlint.models.schemas import LintReport, RequirementIndexEntry
from reqlint.orchestration.runner import LintRunner
from reqlint.rules.rules_config import LintRulesConfig

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
lint_router = APIRouter()


# ── Request schemas ──────────────────────────────────────
class LintRequest(BaseModel):
    documents: dict[str, str]  # relative path -> markdown text
    config: LintRulesConfig | None = None


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Lint ─────────────────────────────────────────────────

@lint_router.post("/lint", response_model=LintReport)
def lint_documents(request: LintRequest) -> LintReport:
    runner = LintRunner(config=request.config or LintRulesConfig())
    try:
        report = runner.run_documents(request.documents)
    except ValueError as e:
        logger.warning(f"Rejected lint request: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(
        f"Linted {report.summary.documents} documents via API "
        f"({len(report.violations)} violations)"
    )
    return report


@lint_router.post("/index", response_model=list[RequirementIndexEntry])
def index_documents(request: LintRequest) -> list[RequirementIndexEntry]:
    runner = LintRunner(config=request.config or LintRulesConfig())
    try:
        return runner.index_documents(request.documents)
    except ValueError as e:
        logger.warning(f"Rejected index request: {e}")
        raise HTTPException(status_code=422, detail=str(e))
