"""Coach chat: a thin proxy to an LLM messages API, with a monthly request quota for free accounts."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from src.api.models import ChatRequest, ChatResponse, ChatUsage
from src.core.config import settings
from src.core.exceptions import AnalysisUnavailableError, QuotaExceededError
from src.core.models import CoachUsageModel, UserModel
from src.core.shared_types import SubscriptionType
from src.db.repository import CoachUsageRepository

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

SYSTEM_PROMPT = (
    "You are GammonGuru, a friendly and precise backgammon coach. "
    "Explain the reasoning behind moves in plain language (pip count, blots, primes, timing), "
    "adapt the depth of your answers to a {level} player and keep answers short."
)


def current_month(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m")


class CoachService:
    def __init__(
        self,
        repository: CoachUsageRepository,
        session: requests.Session | None = None,
        api_url: str = settings.COACH_API_URL,
        api_key: str = settings.COACH_API_KEY,
    ) -> None:
        self.repo = repository
        self.session = session or requests.Session()
        self.api_url = api_url
        self.api_key = api_key

    def chat(self, user: UserModel, request: ChatRequest) -> ChatResponse:
        """Answer a coaching question. Only answered questions count against the quota."""
        is_premium = user.subscription_type == SubscriptionType.PREMIUM
        month = current_month()
        usage = self.repo.get_usage(user.id, month) or CoachUsageModel(
            user_id=user.id, month=month, requests=0
        )
        if not is_premium and usage.requests >= settings.FREE_COACH_QUOTA:
            raise QuotaExceededError(
                "Monthly coach quota reached. Upgrade to Premium for unlimited coaching.",
                remaining=0,
            )

        answer = self._ask(request, request.player_level or user.level)

        usage.requests += 1
        self.repo.save_usage(usage)
        logger.info("Coach answered user %s (%d requests this month)", user.id, usage.requests)

        if is_premium:
            return ChatResponse(response=answer, usage=ChatUsage())
        return ChatResponse(
            response=answer,
            usage=ChatUsage(
                remaining=settings.FREE_COACH_QUOTA - usage.requests,
                total=settings.FREE_COACH_QUOTA,
            ),
        )

    def _ask(self, request: ChatRequest, level: str) -> str:
        if not self.api_key:
            raise AnalysisUnavailableError("Coach service is not configured")

        system = SYSTEM_PROMPT.format(level=str(level).lower())
        if request.game_context:
            system += f"\nCurrent game context: {json.dumps(request.game_context)}"

        try:
            response = self.session.post(
                self.api_url,
                json={
                    "model": settings.COACH_MODEL,
                    "max_tokens": settings.COACH_MAX_TOKENS,
                    "system": system,
                    "messages": [{"role": "user", "content": request.message}],
                },
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": ANTHROPIC_VERSION,
                    "content-type": "application/json",
                },
                timeout=settings.COACH_TIMEOUT,
            )
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except requests.RequestException as exc:
            logger.error("Coach API call failed: %s", exc)
            raise AnalysisUnavailableError("Coach service temporarily unavailable") from exc
        except ValueError as exc:
            raise AnalysisUnavailableError("Coach service returned invalid JSON") from exc

        text = _first_text(data.get("content"))
        if text is None:
            raise AnalysisUnavailableError("Coach service returned an empty answer")
        return text


def _first_text(content: Any) -> Optional[str]:
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            return block.get("text")
    return None
