"""
readiness/services/score_calculator.py
Turns a SignalSet into the 0–100 readiness score and the done / issues /
improve feedback lists. Also generates a human-readable summary string.
"""
from typing import List

from ..models import Feedback, ImproveItem, IssueItem, ScoreResult, SignalSet
from .checks import CHECKS, CheckDefinition


def _failed(signals: SignalSet) -> List[CheckDefinition]:
    return [check for check in CHECKS if not check.passes(signals)]


def calculate_score(signals: SignalSet) -> int:
    """
    100 minus the weight of every failing check, clamped to 0–100.
    Checks are independent; there is no partial credit.
    """
    raw = 100 - sum(check.weight for check in _failed(signals))
    return max(0, min(100, raw))


def compose_feedback(signals: SignalSet) -> Feedback:
    """One done entry per passing check, one issue + improve pair per failing check."""
    done: List[str] = []
    issues: List[IssueItem] = []
    improve: List[ImproveItem] = []

    for check in CHECKS:
        if check.passes(signals):
            done.append(check.pass_message)
            continue
        issues.append(IssueItem(
            title=check.issue_title,
            summary=check.issue_summary,
            why=list(check.why),
            risks=list(check.risks),
        ))
        improve.append(ImproveItem(
            title=check.improve_title,
            summary=check.improve_summary,
        ))

    return Feedback(done=done, issues=issues, improve=improve)


def evaluate(signals: SignalSet) -> ScoreResult:
    feedback = compose_feedback(signals)
    return ScoreResult(score=calculate_score(signals), **feedback.model_dump())


def score_rating(score: int) -> str:
    if score >= 90:
        return "excellent"
    if score >= 75:
        return "good"
    if score >= 60:
        return "needs_improvement"
    return "urgent"


_RATING_LABELS = {
    "excellent": "excellent",
    "good": "good",
    "needs_improvement": "in need of improvement",
    "urgent": "in urgent need of work",
}


def generate_summary(result: ScoreResult) -> str:
    """Generate a short human-readable summary of the audit result."""
    label = _RATING_LABELS[score_rating(result.score)]
    summary = f"AI search readiness is {label} ({result.score}/100)."
    if result.issues:
        titles = ", ".join(issue.title for issue in result.issues[:3])
        more = len(result.issues) - 3
        if more > 0:
            titles += f" and {more} more"
        summary += f" Key issues: {titles}."
    else:
        summary += " All readiness checks passed."
    return summary
