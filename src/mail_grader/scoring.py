"""
Holistic newsletter score parsing.

The scoring prompt asks for five percentages, a summary and a list of
next improvements, in a fixed line format:

    Audience Fit: 72%
    Tone: 80%
    Clarity: 65%
    Engagement: 70%
    Spam Risk: 20%

    Summary:
    - ...

    Improve Next:
    - ...
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .metrics import score_to_grade

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50

SCORE_LABELS = {
    "audience_fit": "Audience Fit",
    "tone": "Tone",
    "clarity": "Clarity",
    "engagement": "Engagement",
    "spam_risk": "Spam Risk",
}

PERCENT_RE = re.compile(r"(\d{1,3})\s*%")


@dataclass
class HolisticScore:
    """Scores (0-100) for the five categories plus the written feedback."""
    audience_fit: int = DEFAULT_SCORE
    tone: int = DEFAULT_SCORE
    clarity: int = DEFAULT_SCORE
    engagement: int = DEFAULT_SCORE
    spam_risk: int = DEFAULT_SCORE
    summary: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)  # Categories that defaulted

    @property
    def average(self) -> float:
        """Mean of the five scores with spam risk inverted (lower risk is better)."""
        return (
            self.audience_fit + self.tone + self.clarity + self.engagement
            + (100 - self.spam_risk)
        ) / 5

    @property
    def overall_grade(self) -> str:
        return overall_grade(self)

    def to_dict(self) -> dict:
        return {
            "audienceFit": self.audience_fit,
            "tone": self.tone,
            "clarity": self.clarity,
            "engagement": self.engagement,
            "spamRisk": self.spam_risk,
            "summary": list(self.summary),
            "improvements": list(self.improvements),
            "overallGrade": self.overall_grade,
        }


def overall_grade(score: HolisticScore) -> str:
    """A-F grade from the averaged scores."""
    return score_to_grade(score.average)


def _extract_score(lines: list[str], label: str) -> Optional[int]:
    line = next((ln for ln in lines if ln.lower().startswith(label.lower())), None)
    if line is None:
        return None
    match = PERCENT_RE.search(line)
    if not match:
        return None
    return min(100, int(match.group(1)))


def _extract_section(lines: list[str], header: str) -> list[str]:
    """Collect "- " bullets after header until the next header line."""
    start = next((i for i, ln in enumerate(lines) if header.lower() in ln.lower()), None)
    if start is None:
        logger.warning(f"Score response has no '{header}' section")
        return []

    bullets = []
    for line in lines[start + 1:]:
        if line.startswith(("-", "*", "•")):
            bullets.append(line[1:].strip())
        elif ":" in line:
            break
    return bullets


def parse_score_response(text: str) -> HolisticScore:
    """
    Parse the collaborator's scoring response.

    Missing or unparseable scores default to 50 with a logged warning.

    Args:
        text: Raw response text.

    Returns:
        HolisticScore.
    """
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    score = HolisticScore()

    for attr, label in SCORE_LABELS.items():
        value = _extract_score(lines, label)
        if value is None:
            logger.warning(f"Could not parse score for {label}, defaulting to {DEFAULT_SCORE}")
            score.missing.append(attr)
            continue
        setattr(score, attr, value)

    score.summary = _extract_section(lines, "Summary:")
    score.improvements = _extract_section(lines, "Improve Next:")
    return score
