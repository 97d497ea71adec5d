"""
LLM client for newsletter rewriting and holistic scoring.

The core analysis never calls this module. The CLI and API use it to ask
Claude for a rewrite (returned as <old_draft>/<optimized_draft> pairs)
or a five-category score.
"""

import os
from typing import Optional

import anthropic
import httpx

from .draft_pairs import DraftParseResult, parse_draft_pairs
from .scoring import HolisticScore, parse_score_response


class LLMClientError(Exception):
    """Raised when LLM operations fail."""
    pass


DEFAULT_MODEL = "claude-sonnet-4-20250514"


def build_editor_system_prompt(
    tone_label: str = "Friendly & conversational",
    target_grade_low: int = 6,
    target_grade_high: int = 9,
) -> str:
    """System prompt for the rewrite pass."""
    return f"""ROLE
You are a senior newsletter editor. Your job is to REWRITE weak passages of the draft with high clarity and usefulness. Do not summarize.

NON-NEGOTIABLES
1) Keep all true facts, names, numbers, links. If unsure, keep original wording.
2) Target reading level: grade {target_grade_low}-{target_grade_high}.
3) Match tone: {tone_label}.
4) No hype, no fluff, no cliches, no buzzwords.
5) Never invent claims, numbers or sources.

STYLE RULES
- Be specific. Prefer examples, numbers, and plain words.
- Each sentence must earn its place; remove filler.
- Prefer active voice and concrete verbs.
- If a sentence is hard to parse, split it.
- Replace vague dates and quantities only with details already in the draft.

SPAM/BAD PHRASES (never use)
free, unlock, win, exclusive offer, act now, risk-free, limited time, bonus, miracle, guaranteed, secret, instant, amazing, once-in-a-lifetime, congratulations, game-changer, supercharge.

OUTPUT FORMAT - MUST FOLLOW:
- For every passage you change, output exactly:
  <old_draft>exact original text, copied character for character</old_draft><optimized_draft>your rewrite</optimized_draft>
- List pairs in the order the passages appear in the draft.
- Passages you do not change are not listed.
- Do NOT nest tags. Do NOT add commentary, headers or quotes."""


SCORE_SYSTEM_PROMPT = """You are a senior newsletter editor. Be concise, concrete, and non-promotional. Use the user-provided context if present.
Score each category (0-100):
* Audience Fit: How well the content serves the intended audience's needs/level.
* Tone: Appropriate + consistent voice for the audience and goal.
* Clarity: First-pass readability; short, direct sentences; logical flow.
* Engagement: Hook strength, novelty/originality, specificity, story/examples.
* Spam Risk: Hype/claims/spam trigger terms; salesy vibe.

Rules
* Prefer specifics over platitudes.
* If a category had several issues, the score should reflect that.
* Spam risk: higher % = more spammy.
* Be balanced: one sentence on strengths, one on weaknesses, then 2-3 action bullets.

Output EXACTLY this:
Audience Fit: XX%
Tone: XX%
Clarity: XX%
Engagement: XX%
Spam Risk: XX%

Summary:
- [1-2 sentences: overall, mention audience]
- [1-2 sentences: key weaknesses]

Improve Next:
- [bullet 1: specific action]
- [bullet 2: specific action]
- [bullet 3: specific action]"""


def build_user_message(
    content: str,
    audience: Optional[str] = None,
    goal: Optional[str] = None,
) -> str:
    """Prefix the newsletter with optional audience and goal context."""
    context = []
    if audience:
        context.append(f"Intended Audience: {audience}")
    if goal:
        context.append(f"Newsletter Goal: {goal}")
    if not context:
        return content
    return "\n".join(context) + f"\n\nNewsletter Content:\n{content}"


class LLMClient:
    """
    Client for LLM-based newsletter rewriting and scoring.

    Supports Anthropic Claude API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
    ):
        """
        Initialize the LLM client.

        Args:
            api_key: API key for the LLM provider. If None, reads from ANTHROPIC_API_KEY env var.
            model: Model identifier to use.
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model

        if not self.api_key:
            raise LLMClientError(
                "No API key provided. Set ANTHROPIC_API_KEY environment variable "
                "or pass api_key parameter."
            )

        http_client = httpx.Client(
            timeout=httpx.Timeout(60.0, connect=30.0),
            follow_redirects=True,
        )
        self.client = anthropic.Anthropic(
            api_key=self.api_key,
            http_client=http_client,
        )

    def _complete(self, system: str, user_message: str, max_tokens: int, temperature: float) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": user_message}],
            )
        except Exception as e:
            raise LLMClientError(f"LLM API call failed: {e}") from e

        if not response.content:
            raise LLMClientError("LLM returned an empty response")
        return response.content[0].text

    def rewrite_as_pairs(
        self,
        content: str,
        audience: Optional[str] = None,
        goal: Optional[str] = None,
        tone: str = "Friendly & conversational",
        max_tokens: int = 4096,
    ) -> str:
        """
        Ask for a rewrite of the newsletter's weak passages.

        Returns:
            Raw response with <old_draft>/<optimized_draft> pairs.
        """
        if not content or not content.strip():
            raise LLMClientError("Content cannot be empty")
        return self._complete(
            build_editor_system_prompt(tone_label=tone),
            build_user_message(content, audience, goal),
            max_tokens=max_tokens,
            temperature=0.3,
        )

    def improve(
        self,
        content: str,
        audience: Optional[str] = None,
        goal: Optional[str] = None,
    ) -> DraftParseResult:
        """Rewrite and parse the response into draft pairs."""
        return parse_draft_pairs(self.rewrite_as_pairs(content, audience=audience, goal=goal))

    def score_newsletter(
        self,
        content: str,
        audience: Optional[str] = None,
        goal: Optional[str] = None,
        max_tokens: int = 1024,
    ) -> HolisticScore:
        """
        Score the newsletter on five categories.

        Returns:
            HolisticScore parsed from the response.
        """
        if not content or not content.strip():
            raise LLMClientError("Content cannot be empty")
        raw = self._complete(
            SCORE_SYSTEM_PROMPT,
            build_user_message(content, audience, goal),
            max_tokens=max_tokens,
            temperature=0.2,
        )
        return parse_score_response(raw)


def create_llm_client(
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
) -> LLMClient:
    """
    Factory function to create an LLM client.

    Args:
        api_key: Optional API key. If None, uses environment variable.
        model: Model to use.

    Returns:
        Configured LLMClient instance.
    """
    return LLMClient(api_key=api_key, model=model)
