from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from enum import Enum


class ProbeStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    PROBE_FAILED = "probe_failed"


# ─── Signals ───────────────────────────────────────────────────────────────────

class SignalSet(BaseModel):
    """Raw readiness facts about one target page. Collected once, never mutated."""
    model_config = ConfigDict(frozen=True)

    https: bool
    llms_txt: bool
    robots_txt: bool
    sitemap_xml: bool
    structured_data: bool
    favicon: bool
    content_length: int = Field(..., ge=0, description="Raw byte length of the page body")


class SignalReport(BaseModel):
    """SignalSet plus the three-state outcome of every well-known-path probe."""
    target: str
    signals: SignalSet
    probes: Dict[str, ProbeStatus] = {}


# ─── Score Models ──────────────────────────────────────────────────────────────

class IssueItem(BaseModel):
    title: str
    summary: str
    why: List[str] = []
    risks: List[str] = []


class ImproveItem(BaseModel):
    title: str
    summary: str


class Feedback(BaseModel):
    done: List[str] = []
    issues: List[IssueItem] = []
    improve: List[ImproveItem] = []


class ScoreResult(Feedback):
    score: int = Field(..., ge=0, le=100)


# ─── Request Models ────────────────────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    # Optional so a missing url maps to our own 400 instead of FastAPI's 422
    url: Optional[str] = Field(None, description="The page to audit")

    model_config = {
        "json_schema_extra": {
            "example": {"url": "https://example.com"}
        }
    }


class PdfRequest(BaseModel):
    result: Optional[Any] = Field(
        None,
        description="Report text keyed by seo/ux/conversion/strengths/weaknesses/improvement",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "result": {
                    "seo": "Title tags are descriptive\n- Meta descriptions are missing",
                    "strengths": ["Fast first paint", "Clear navigation"],
                }
            }
        }
    }


# ─── Response Models ───────────────────────────────────────────────────────────

class AnalyzeResponse(ScoreResult):
    success: bool = True
    rating: str
    summary: str


class LlmsCheckResponse(BaseModel):
    success: bool = True
    url: str
    llms_url: str
    status: ProbeStatus
    grade: str
    issues: List[str] = []
    suggestions: List[str] = []


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
