"""
Pytest fixtures and configuration for Mail Grader tests.
"""

import pytest
from pathlib import Path

from mail_grader.config import AnalysisOptions
from mail_grader.models import IssueKind, Sentence
from mail_grader.rules import RuleSet


SAMPLE_NEWSLETTER = """Weekly Product Update

Hi there! We have some really exciting news to share with you this week.

Our team shipped several improvements to the dashboard. Reports now load in 2 seconds instead of 9.

We are the best analytics tool on the market. You might want to try the new export feature soon.

- Faster report loading
- A new CSV export
- Dark mode for the editor

Sign up for the webinar at https://example.com/webinar to learn more.

Thanks for reading,
The Team
"""

SAMPLE_HTML = (
    "<h1>Weekly Product Update</h1>"
    "<p>Hi there! We have some <b>really</b> exciting news to share.</p>"
    "<p>Our team shipped <em>several</em> improvements &amp; fixes to the dashboard.</p>"
)


def make_sentence(text: str, index: int = 0, start: int = 0) -> Sentence:
    """Build a standalone sentence for rule tests."""
    return Sentence(index=index, text=text, start=start, end=start + len(text))


@pytest.fixture
def sample_newsletter() -> str:
    return SAMPLE_NEWSLETTER


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def newsletter_file(tmp_path: Path) -> Path:
    """Write the sample newsletter to a text file."""
    path = tmp_path / "newsletter.txt"
    path.write_text(SAMPLE_NEWSLETTER, encoding="utf-8")
    return path


@pytest.fixture
def default_rules() -> RuleSet:
    return RuleSet()


@pytest.fixture
def fluff_only_rules() -> RuleSet:
    """Only the fluff rule, with a single-phrase lexicon."""
    options = AnalysisOptions(fluff_phrases=("really great",))
    return RuleSet(options).only(IssueKind.FLUFF)
