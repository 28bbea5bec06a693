"""Weekly research digest pipeline: prompt -> OpenAI -> sanitized articles."""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from core.config import DigestSettings
from core.openai_client import OpenAIResponsesClient
from models.schemas import MAX_ARTICLES, ArticleReference, DigestResult, UpstreamDigestPayload

logger = logging.getLogger(__name__)

# ---- Prompt (edit freely) ----
WEEKLY_PROMPT = """
You are producing a weekly research digest for the EU residential solar PV & energy storage market.
TIME WINDOW: last 7 calendar days only.
SCOPE: residential PV + hybrid inverters + residential batteries (exclude C&I and utility).
GEOGRAPHY: Germany, Austria, Switzerland, Belgium, Netherlands, Italy, United Kingdom, Romania, Czech Republic, Spain, France.
SOURCES PRIORITY: national solar associations, grid operators/DSOs/TSOs, energy regulators, government portals, major distributors and installers, reputable trade media (pv-magazine, SolarPower Europe, etc.). Avoid low-quality blogs and generic SEO farms.
COMPETITORS: Huawei, SMA, Fronius, GoodWe, Growatt, Deye, SigEnergy, Dyness. Exclude Sungrow.
INCLUDE: product launches, certifications/compliance (e.g., G99, CEI 0-21, C15-712-3, NC RfG), firmware/feature updates, partnerships, pricing/positioning, policy/regulatory changes, incentives/subsidies relevant to residential PV/ESS, notable installer/distributor programs.
DE-DUPLICATE: canonicalize URLs (strip tracking params; prefer original source over rewrites).
OUTPUT: STRICT JSON only, no prose. Exactly:
{
  "articles": [
    {"url":"https://...", "title":"..."},
    ...
  ]
}
Return 10-40 high-quality items max. If nothing qualifies, return {"articles":[]}.
""".strip()


def parse_articles(raw_text: str, *, limit: int = MAX_ARTICLES) -> List[ArticleReference]:
    """Turn model output into at most ``limit`` valid article references.

    Text that is not JSON (including nesting too deep to decode), or JSON
    without an ``articles`` list, yields an empty list rather than an error.
    """

    try:
        parsed = json.loads(raw_text)
    except (TypeError, ValueError, RecursionError):
        logger.warning(
            "Model output was not valid JSON",
            extra={"operation": "digest_parse_failed", "text_preview": str(raw_text)[:200]},
        )
        parsed = {"articles": []}

    if not isinstance(parsed, dict):
        parsed = {"articles": []}

    payload = UpstreamDigestPayload.model_validate(parsed)

    articles: List[ArticleReference] = []
    dropped = 0
    for item in payload.articles:
        if len(articles) >= limit:
            break
        if not isinstance(item, dict):
            dropped += 1
            continue
        try:
            articles.append(ArticleReference.model_validate(item))
        except ValidationError:
            dropped += 1

    if dropped:
        logger.info(
            "Dropped invalid article entries",
            extra={"operation": "digest_sanitize", "dropped": dropped},
        )
    return articles


class DigestPipeline:
    """Runs the weekly prompt through OpenAI and normalises the answer."""

    def __init__(
        self,
        settings: DigestSettings,
        *,
        client: Optional[OpenAIResponsesClient] = None,
        prompt: str = WEEKLY_PROMPT,
    ) -> None:
        self.settings = settings
        self.client = client or OpenAIResponsesClient(settings)
        self.prompt = prompt

    def run(self) -> DigestResult:
        """Call the model and return the sanitized digest.

        ``UpstreamCallError`` and transport errors propagate to the caller.
        """

        try:
            result = self.client.create_json_response(self.prompt)
        finally:
            self.client.close()

        articles = parse_articles(result.text)
        logger.info(
            "Weekly digest built",
            extra={
                "operation": "digest_built",
                "model": result.model,
                "used_fallback": result.used_fallback,
                "article_count": len(articles),
            },
        )
        return DigestResult(articles=articles)


__all__ = ["DigestPipeline", "WEEKLY_PROMPT", "parse_articles"]
