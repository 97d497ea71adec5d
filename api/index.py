"""
FastAPI wrapper for Mail Grader - Vercel Serverless Function.

This module exposes newsletter grading, draft alignment and the LLM
rewrite/score passes as a REST API.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mail_grader import __version__
from mail_grader.aligner import align
from mail_grader.analyzer import analyze
from mail_grader.config import AnalysisOptions, ConfigError
from mail_grader.draft_pairs import parse_draft_pairs, rewrite_to_pairs
from mail_grader.llm_client import LLMClientError, create_llm_client
from mail_grader.models import Document
from mail_grader.rules import RuleSet
from mail_grader.scoring import parse_score_response

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mail Grader API",
    description="Newsletter grading with inline issue highlights and side-by-side rewrites",
    version=__version__,
)

# Enable CORS for all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AnalyzeRequest(BaseModel):
    """Request model for newsletter analysis."""
    plain_text: Optional[str] = Field(None, description="Plain text of the newsletter")
    formatted_content: Optional[str] = Field(
        None,
        description="HTML of the newsletter. Plain text is derived from it when plain_text is omitted.",
    )
    options: Optional[dict[str, Any]] = Field(None, description="Analysis option overrides")


class AlignRequest(BaseModel):
    """Request model for draft alignment."""
    original: str = Field(..., description="Original plain text")
    markup: Optional[str] = Field(None, description="Rewrite output with <old_draft>/<optimized_draft> pairs")
    rewritten: Optional[str] = Field(None, description="Full rewritten text")


class CollaboratorRequest(BaseModel):
    """Request model for the LLM rewrite and score passes."""
    content: str = Field(..., description="Newsletter plain text")
    audience: Optional[str] = Field(None, description="Intended audience")
    goal: Optional[str] = Field(None, description="Newsletter goal")


class ScoreRequest(CollaboratorRequest):
    """Score request; raw_response skips the LLM call and only parses."""
    raw_response: Optional[str] = Field(None, description="Previously obtained score response")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


def _alignment_payload(original: str, pairs, issues) -> dict:
    payload = align(original, pairs).to_dict()
    payload["parseIssues"] = [i.to_dict() for i in issues]
    return payload


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
    )


@app.get("/api/info")
async def api_info():
    """Get API information and usage instructions."""
    return {
        "name": "Mail Grader API",
        "version": __version__,
        "description": "Newsletter grading and rewrite alignment",
        "endpoints": {
            "GET /api/health": "Health check",
            "POST /api/analyze": "Grade a newsletter and return highlights",
            "POST /api/align": "Align draft pairs or a full rewrite against the original",
            "POST /api/improve": "Rewrite weak passages with the LLM and align them",
            "POST /api/score": "Holistic five-category score",
            "GET /api/info": "This endpoint",
        },
        "documentation": "/docs",
        "openapi": "/openapi.json",
    }


# Routes that grade or call the LLM are plain functions; FastAPI runs them
# in its threadpool so a slow request never holds up the event loop.

@app.post("/api/analyze")
def analyze_newsletter(request: AnalyzeRequest):
    """
    Grade a newsletter.

    Returns annotated text, highlights (in formatted offsets when HTML is
    supplied), per-sentence issues, document notes, metrics and summary.
    """
    if not (request.plain_text and request.plain_text.strip()) and not request.formatted_content:
        raise HTTPException(status_code=400, detail="Provide plain_text or formatted_content")

    try:
        options = AnalysisOptions.from_dict(request.options)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if request.plain_text is None:
        document = Document.from_html(request.formatted_content)
    else:
        document = Document(plain_text=request.plain_text, formatted_content=request.formatted_content)

    return analyze(document, RuleSet(options)).to_dict()


@app.post("/api/align")
def align_drafts(request: AlignRequest):
    """Align rewrite pairs (or a full rewrite) against the original text."""
    if request.markup is not None and request.rewritten is not None:
        raise HTTPException(status_code=400, detail="Provide only one of markup or rewritten")

    if request.markup is not None:
        parsed = parse_draft_pairs(request.markup)
        return _alignment_payload(request.original, parsed.pairs, parsed.issues)
    if request.rewritten is not None:
        return _alignment_payload(request.original, rewrite_to_pairs(request.original, request.rewritten), [])
    raise HTTPException(status_code=400, detail="Provide markup or rewritten")


@app.post("/api/improve")
def improve_newsletter(request: CollaboratorRequest):
    """Ask the LLM for rewrite pairs and align them against the content."""
    try:
        client = create_llm_client()
        parsed = client.improve(request.content, audience=request.audience, goal=request.goal)
    except LLMClientError as e:
        logger.warning(f"Improve failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return _alignment_payload(request.content, parsed.pairs, parsed.issues)


@app.post("/api/score")
def score_newsletter(request: ScoreRequest):
    """Score the newsletter on audience fit, tone, clarity, engagement and spam risk."""
    if request.raw_response is not None:
        return parse_score_response(request.raw_response).to_dict()

    try:
        client = create_llm_client()
        score = client.score_newsletter(request.content, audience=request.audience, goal=request.goal)
    except LLMClientError as e:
        logger.warning(f"Score failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return score.to_dict()
