"""Unit tests for src/services/coach_service.py"""

from typing import Any

import pytest
import requests

from src.api.models import ChatRequest
from src.core.exceptions import AnalysisUnavailableError, QuotaExceededError
from src.core.models import CoachUsageModel
from src.core.shared_types import SubscriptionType, UserLevel
from src.services.coach_service import CoachService, current_month

ANSWER = {"content": [{"type": "text", "text": "Make your 5 point with 8/5 6/5."}]}


# --- MOCK DEPENDENCIES ----
class MockResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self.payload


class MockSession:
    def __init__(self, response: MockResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or MockResponse(ANSWER)
        self.error = error
        self.calls: list[dict] = []

    def post(self, url: str, **kwargs) -> MockResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def _coach(repository, session: MockSession, api_key: str = "test-key") -> CoachService:
    return CoachService(repository, session=session, api_url="http://llm.local/v1/messages", api_key=api_key)


def test_chat_forwards_question(coach_usage_repository, alice) -> None:
    session = MockSession()
    coach = _coach(coach_usage_repository, session)

    response = coach.chat(
        alice,
        ChatRequest(message="What should I play with 3-1?", game_context={"dice": [3, 1]}),
    )
    assert response.response == "Make your 5 point with 8/5 6/5."
    assert response.usage.remaining == 9
    assert response.usage.total == 10

    call = session.calls[0]
    assert call["headers"]["x-api-key"] == "test-key"
    assert call["json"]["messages"] == [{"role": "user", "content": "What should I play with 3-1?"}]
    assert "beginner" in call["json"]["system"]
    assert '"dice": [3, 1]' in call["json"]["system"]


def test_player_level_overrides_account_level(coach_usage_repository, alice) -> None:
    session = MockSession()
    _coach(coach_usage_repository, session).chat(
        alice, ChatRequest(message="Hi", player_level=UserLevel.EXPERT)
    )
    assert "expert" in session.calls[0]["json"]["system"]


def test_free_quota_is_enforced(coach_usage_repository, alice) -> None:
    coach_usage_repository.save_usage(
        CoachUsageModel(user_id=alice.id, month=current_month(), requests=10)
    )
    session = MockSession()
    with pytest.raises(QuotaExceededError):
        _coach(coach_usage_repository, session).chat(alice, ChatRequest(message="Hi"))
    assert session.calls == []


def test_premium_users_are_not_limited(coach_usage_repository, create_user) -> None:
    premium = create_user("carol", subscription_type=SubscriptionType.PREMIUM)
    coach_usage_repository.save_usage(
        CoachUsageModel(user_id=premium.id, month=current_month(), requests=50)
    )
    response = _coach(coach_usage_repository, MockSession()).chat(premium, ChatRequest(message="Hi"))
    assert response.usage.remaining is None
    assert coach_usage_repository.get_usage(premium.id, current_month()).requests == 51


def test_failed_call_is_not_counted(coach_usage_repository, alice) -> None:
    session = MockSession(error=requests.Timeout("timed out"))
    with pytest.raises(AnalysisUnavailableError):
        _coach(coach_usage_repository, session).chat(alice, ChatRequest(message="Hi"))
    assert coach_usage_repository.get_usage(alice.id, current_month()) is None


def test_unconfigured_coach(coach_usage_repository, alice) -> None:
    with pytest.raises(AnalysisUnavailableError):
        _coach(coach_usage_repository, MockSession(), api_key="").chat(alice, ChatRequest(message="Hi"))


def test_empty_answer(coach_usage_repository, alice) -> None:
    session = MockSession(MockResponse({"content": []}))
    with pytest.raises(AnalysisUnavailableError):
        _coach(coach_usage_repository, session).chat(alice, ChatRequest(message="Hi"))
