"""Unit tests for src/services/auth_service.py"""

from uuid import uuid4

import jwt
import pytest

from src.api.models import LoginRequest, RefreshRequest, RegisterRequest, UpdateProfileRequest
from src.core.exceptions import AuthenticationError, ConflictError
from src.core.shared_types import SubscriptionType, TokenType, UserLevel
from src.services.auth_service import (
    AuthService,
    TokenIssuer,
    hash_password,
    verify_password,
)

SECRET = "test-secret"
PASSWORD = "backgammon"


@pytest.fixture
def tokens() -> TokenIssuer:
    return TokenIssuer(secret=SECRET, access_ttl=60, refresh_ttl=120)


@pytest.fixture
def auth(user_repository, tokens) -> AuthService:
    """Cheap bcrypt rounds keep the tests fast."""
    return AuthService(user_repository, tokens=tokens, bcrypt_rounds=4)


def _register(auth: AuthService, email: str = "Alice@Example.com", username: str = "Alice"):
    return auth.register(RegisterRequest(email=email, password=PASSWORD, username=username))


# --- PASSWORDS ---
def test_password_hashing() -> None:
    password_hash = hash_password(PASSWORD, rounds=4)
    assert password_hash != PASSWORD
    assert verify_password(PASSWORD, password_hash)
    assert not verify_password("wrong-password", password_hash)


# --- TOKENS ---
def test_token_round_trip(tokens: TokenIssuer) -> None:
    user_id = uuid4()
    pair = tokens.issue(user_id)
    assert pair.expires_in == 60
    assert pair.token_type == "Bearer"
    assert tokens.verify(pair.access_token) == user_id
    assert tokens.verify(pair.refresh_token, TokenType.REFRESH) == user_id


def test_refresh_token_is_not_an_access_token(tokens: TokenIssuer) -> None:
    pair = tokens.issue(uuid4())
    with pytest.raises(AuthenticationError):
        tokens.verify(pair.refresh_token, TokenType.ACCESS)


def test_token_signed_with_other_secret(tokens: TokenIssuer) -> None:
    forged = TokenIssuer(secret="another-secret").issue(uuid4())
    with pytest.raises(AuthenticationError):
        tokens.verify(forged.access_token)


def test_expired_token(tokens: TokenIssuer) -> None:
    expired = jwt.encode(
        {"sub": str(uuid4()), "type": "access", "exp": 1}, SECRET, algorithm="HS256"
    )
    with pytest.raises(AuthenticationError, match="expired"):
        tokens.verify(expired)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token(tokens: TokenIssuer, token: str) -> None:
    with pytest.raises(AuthenticationError):
        tokens.verify(token)


# --- REGISTER ---
def test_register_new_user(auth: AuthService, user_repository) -> None:
    response = _register(auth)

    assert response.user.email == "alice@example.com"
    assert response.user.username == "alice"
    assert response.user.elo == 1500
    assert response.user.level == UserLevel.BEGINNER
    assert response.user.subscription_type == SubscriptionType.FREE
    assert response.tokens.access_token

    stored = user_repository.get_user(response.user.id)
    assert stored is not None
    assert stored.password_hash != PASSWORD
    assert verify_password(PASSWORD, stored.password_hash)


def test_register_duplicate_email(auth: AuthService) -> None:
    _register(auth)
    with pytest.raises(ConflictError):
        _register(auth, email="alice@example.com", username="someone-else")


def test_register_duplicate_username(auth: AuthService) -> None:
    _register(auth)
    with pytest.raises(ConflictError):
        _register(auth, email="other@example.com", username="alice")


# --- LOGIN ---
def test_login(auth: AuthService) -> None:
    registered = _register(auth)
    response = auth.login(LoginRequest(email="ALICE@example.com", password=PASSWORD))
    assert response.user.id == registered.user.id
    assert response.user.last_login_at is not None
    assert auth.authenticate(response.tokens.access_token).id == registered.user.id


def test_wrong_password_and_unknown_email_fail_alike(auth: AuthService) -> None:
    _register(auth)
    with pytest.raises(AuthenticationError) as wrong_password:
        auth.login(LoginRequest(email="alice@example.com", password="not-the-password"))
    with pytest.raises(AuthenticationError) as unknown_email:
        auth.login(LoginRequest(email="nobody@example.com", password=PASSWORD))
    assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"


def test_deactivated_account(auth: AuthService, user_repository) -> None:
    registered = _register(auth)
    auth.deactivate_account(auth.authenticate(registered.tokens.access_token))
    assert user_repository.get_user(registered.user.id).is_active is False

    with pytest.raises(AuthenticationError, match="deactivated"):
        auth.login(LoginRequest(email="alice@example.com", password=PASSWORD))
    with pytest.raises(AuthenticationError):
        auth.authenticate(registered.tokens.access_token)


# --- REFRESH / PROFILE ---
def test_refresh(auth: AuthService) -> None:
    registered = _register(auth)
    pair = auth.refresh(RefreshRequest(refresh_token=registered.tokens.refresh_token))
    assert auth.authenticate(pair.access_token).id == registered.user.id


def test_refresh_with_access_token(auth: AuthService) -> None:
    registered = _register(auth)
    with pytest.raises(AuthenticationError):
        auth.refresh(RefreshRequest(refresh_token=registered.tokens.access_token))


def test_update_profile(auth: AuthService) -> None:
    registered = _register(auth)
    user = auth.authenticate(registered.tokens.access_token)
    profile = auth.update_profile(user, UpdateProfileRequest(username="Gammon_Queen", avatar="avatar.png"))
    assert profile.username == "gammon_queen"
    assert profile.avatar == "avatar.png"


def test_update_profile_to_taken_username(auth: AuthService) -> None:
    _register(auth)
    other = _register(auth, email="bob@example.com", username="bob")
    user = auth.authenticate(other.tokens.access_token)
    with pytest.raises(ConflictError, match="taken"):
        auth.update_profile(user, UpdateProfileRequest(username="alice"))


def test_logout_keeps_account_active(auth: AuthService, user_repository) -> None:
    registered = _register(auth)
    auth.logout(auth.authenticate(registered.tokens.access_token))
    assert user_repository.get_user(registered.user.id).is_active is True


# --- AVAILABILITY ---
def test_check_email(auth: AuthService) -> None:
    _register(auth)
    taken = auth.check_email("ALICE@example.com")
    assert taken.email == "alice@example.com"
    assert taken.is_available is False
    assert auth.check_email("bob@example.com").is_available is True


def test_check_username(auth: AuthService) -> None:
    _register(auth)
    taken = auth.check_username(" Alice ")
    assert taken.username == "alice"
    assert taken.is_available is False
    assert auth.check_username("bob").is_available is True
