"""
readiness/services/checks.py
The fixed table of readiness checks. Each row pairs a signal with the score
deduction applied when it fails and the feedback text shown to the user.
"""
from dataclasses import dataclass
from typing import Callable, Tuple

from ..models import SignalSet

# Pages shorter than this give AI answer engines too little to quote.
MIN_CONTENT_LENGTH = 10_000


@dataclass(frozen=True)
class CheckDefinition:
    key: str
    weight: int
    passes: Callable[[SignalSet], bool]
    pass_message: str
    issue_title: str
    issue_summary: str
    why: Tuple[str, ...]
    risks: Tuple[str, ...]
    improve_title: str
    improve_summary: str


# Order matters: feedback lists are always emitted in this order.
CHECKS: Tuple[CheckDefinition, ...] = (
    CheckDefinition(
        key="llms_txt",
        weight=30,
        passes=lambda s: s.llms_txt,
        pass_message="llms.txt is published",
        issue_title="llms.txt is missing",
        issue_summary="No /llms.txt was found, so AI crawlers get no guidance about which content they may use.",
        why=(
            "llms.txt tells LLM-based crawlers which pages are meant for AI answers and training.",
            "AI search products increasingly look for it before summarizing a site.",
        ),
        risks=(
            "AI answers may quote outdated or unintended pages.",
            "Competitors with a curated llms.txt are easier for AI search to cite.",
        ),
        improve_title="Publish an llms.txt",
        improve_summary="Add /llms.txt listing the pages AI search should rely on and what may be used.",
    ),
    CheckDefinition(
        key="robots_txt",
        weight=10,
        passes=lambda s: s.robots_txt,
        pass_message="robots.txt is configured",
        issue_title="robots.txt is missing",
        issue_summary="No /robots.txt was found, so crawler access is left entirely to defaults.",
        why=(
            "robots.txt is the first file search engines and AI crawlers request.",
            "It is where crawlers are pointed at the sitemap.",
        ),
        risks=(
            "Crawlers may waste budget on low-value or private paths.",
            "AI crawlers cannot be allowed or blocked selectively.",
        ),
        improve_title="Add a robots.txt",
        improve_summary="Publish /robots.txt to control search engine and AI crawler access and reference the sitemap.",
    ),
    CheckDefinition(
        key="sitemap_xml",
        weight=10,
        passes=lambda s: s.sitemap_xml,
        pass_message="sitemap.xml is available",
        issue_title="sitemap.xml was not found",
        issue_summary="No /sitemap.xml was found, so crawlers must discover pages through links alone.",
        why=(
            "A sitemap lists the pages that matter and when they changed.",
            "It speeds up discovery of new and deep pages.",
        ),
        risks=(
            "Important pages may be indexed late or not at all.",
            "AI crawlers may miss the structure of the site.",
        ),
        improve_title="Publish a sitemap.xml",
        improve_summary="Generate /sitemap.xml covering the key pages so search engines and AI crawlers see the site structure.",
    ),
    CheckDefinition(
        key="https",
        weight=10,
        passes=lambda s: s.https,
        pass_message="The site is served over HTTPS",
        issue_title="HTTPS is not used",
        issue_summary="The page is served over plain HTTP.",
        why=(
            "Search engines treat HTTPS as a ranking and trust signal.",
            "Browsers flag HTTP pages as not secure.",
        ),
        risks=(
            "Visitors see security warnings and leave.",
            "Traffic can be read or modified in transit.",
        ),
        improve_title="Enable HTTPS",
        improve_summary="Install a TLS certificate and redirect HTTP to HTTPS so users and search engines trust the site.",
    ),
    CheckDefinition(
        key="structured_data",
        weight=20,
        passes=lambda s: s.structured_data,
        pass_message="Structured data (JSON-LD) is present",
        issue_title="Structured data (JSON-LD) is missing",
        issue_summary="No application/ld+json block was found in the page.",
        why=(
            "JSON-LD states what a page is about in machine-readable form.",
            "AI answers and rich results lean on schema.org markup.",
        ),
        risks=(
            "AI may misread what the business or page offers.",
            "The page is not eligible for rich search results.",
        ),
        improve_title="Add JSON-LD structured data",
        improve_summary="Describe the organization, products and articles with schema.org JSON-LD so AI understands the page precisely.",
    ),
    CheckDefinition(
        key="favicon",
        weight=5,
        passes=lambda s: s.favicon,
        pass_message="A favicon is configured",
        issue_title="Favicon is missing",
        issue_summary="Neither /favicon.ico nor an icon link tag was found.",
        why=(
            "Search results and browser tabs show the favicon next to the site name.",
        ),
        risks=(
            "The brand is harder to recognise in results and bookmarks.",
        ),
        improve_title="Add a favicon",
        improve_summary="Provide a favicon and link it from the page head to strengthen brand recognition.",
    ),
    CheckDefinition(
        key="content_length",
        weight=15,
        passes=lambda s: s.content_length >= MIN_CONTENT_LENGTH,
        pass_message="The page has enough content for AI to quote",
        issue_title="Content volume is low",
        issue_summary="The page is short, which leaves AI little material to learn from or cite.",
        why=(
            "AI answer engines cite pages that cover a topic in depth.",
            "Thin pages rarely rank for informational queries.",
        ),
        risks=(
            "AI answers cite other sources instead of this site.",
            "Expertise on the topic is not visible to search engines.",
        ),
        improve_title="Expand expert content",
        improve_summary="Add in-depth, specialised content so AI has enough material to reference.",
    ),
)

TOTAL_WEIGHT = sum(check.weight for check in CHECKS)

# All failing must give 0 and all passing 100.
if TOTAL_WEIGHT != 100 or any(check.weight <= 0 for check in CHECKS):
    raise RuntimeError(f"check weights must be positive and sum to 100, got {TOTAL_WEIGHT}")
