"""Registration, login and bearer token handling."""

import logging
from datetime import datetime, timedelta, timezone
from functools import cached_property
from uuid import UUID, uuid4

import bcrypt
import jwt

from src.api.models import (
    AuthResponse,
    EmailAvailabilityResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UsernameAvailabilityResponse,
    UserResponse,
)
from src.backgammon.rating import INITIAL_ELO
from src.core.config import settings
from src.core.exceptions import AuthenticationError, ConflictError, UserNotFoundError
from src.core.models import UserModel
from src.core.shared_types import SubscriptionType, TokenType, UserLevel
from src.db.repository import UserRepository

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

INVALID_CREDENTIALS = "Invalid credentials"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = settings.BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))


class TokenIssuer:
    """Signs and verifies the JWTs handed out at login."""

    def __init__(
        self,
        secret: str = settings.JWT_SECRET,
        algorithm: str = settings.JWT_ALGORITHM,
        access_ttl: int = settings.ACCESS_TOKEN_TTL,
        refresh_ttl: int = settings.REFRESH_TOKEN_TTL,
    ) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = {TokenType.ACCESS: access_ttl, TokenType.REFRESH: refresh_ttl}

    def issue(self, user_id: UUID) -> TokenResponse:
        return TokenResponse(
            access_token=self._encode(user_id, TokenType.ACCESS),
            refresh_token=self._encode(user_id, TokenType.REFRESH),
            expires_in=self.ttl[TokenType.ACCESS],
        )

    def verify(self, token: str, expected_type: TokenType = TokenType.ACCESS) -> UUID:
        """Return the user id the token was issued to."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid or expired token") from exc

        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid token type")
        try:
            return UUID(payload["sub"])
        except (KeyError, ValueError) as exc:
            raise AuthenticationError("Invalid or expired token") from exc

    def _encode(self, user_id: UUID, token_type: TokenType) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": str(token_type),
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl[token_type]),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)


class AuthService:
    """Orchestration of user accounts and their tokens."""

    def __init__(
        self,
        repository: UserRepository,
        tokens: TokenIssuer | None = None,
        bcrypt_rounds: int = settings.BCRYPT_ROUNDS,
    ) -> None:
        self.repo = repository
        self.tokens = tokens or TokenIssuer()
        self.bcrypt_rounds = bcrypt_rounds

    # -- API routes logic ---
    def register(self, request: RegisterRequest) -> AuthResponse:
        """Create a new account. Email and username must both be unused."""
        if self.repo.get_user_by_email(request.email) is not None:
            raise ConflictError("This email is already registered")
        if self.repo.get_user_by_username(request.username) is not None:
            raise ConflictError("This username is already registered")

        now = datetime.now(timezone.utc)
        user = self.repo.create_user(
            UserModel(
                id=uuid4(),
                email=request.email,
                username=request.username,
                password_hash=hash_password(request.password, self.bcrypt_rounds),
                elo=INITIAL_ELO,
                level=UserLevel.BEGINNER,
                subscription_type=SubscriptionType.FREE,
                created_at=now,
                last_login_at=now,
            )
        )
        logger.info("User registered: %s", user.id)
        return AuthResponse(user=to_user_response(user), tokens=self.tokens.issue(user.id))

    def login(self, request: LoginRequest) -> AuthResponse:
        """
        Unknown email and wrong password fail identically, so a response never reveals whether an account exists.
        """
        user = self.repo.get_user_by_email(request.email)
        if user is None:
            # spend the same bcrypt work as for a real account
            verify_password(request.password, self._dummy_hash)
            logger.warning("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(request.password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_active:
            raise AuthenticationError("Account deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        user = self.repo.update_user(user) or user
        logger.info("User logged in: %s", user.id)
        return AuthResponse(user=to_user_response(user), tokens=self.tokens.issue(user.id))

    def refresh(self, request: RefreshRequest) -> TokenResponse:
        user = self._active_user(self.tokens.verify(request.refresh_token, TokenType.REFRESH))
        return self.tokens.issue(user.id)

    def authenticate(self, token: str) -> UserModel:
        """Resolve a bearer access token into the (active) user it belongs to."""
        return self._active_user(self.tokens.verify(token, TokenType.ACCESS))

    def get_profile(self, user: UserModel) -> UserResponse:
        return to_user_response(user)

    def update_profile(self, user: UserModel, request: UpdateProfileRequest) -> UserResponse:
        if request.username is not None and request.username != user.username:
            if self.repo.get_user_by_username(request.username) is not None:
                raise ConflictError("Username already taken")
            user.username = request.username
        if request.avatar is not None:
            user.avatar = request.avatar

        updated = self.repo.update_user(user)
        if updated is None:
            raise UserNotFoundError("User not found")
        logger.info("Profile updated: %s", user.id)
        return to_user_response(updated)

    def logout(self, user: UserModel) -> None:
        """
        Tokens are stateless, so there is nothing to revoke server side.
        The client drops its tokens; the event is only logged.
        """
        logger.info("User logged out: %s", user.id)

    def deactivate_account(self, user: UserModel) -> None:
        """Deactivated accounts can no longer log in, and their outstanding tokens stop working."""
        user.is_active = False
        if self.repo.update_user(user) is None:
            raise UserNotFoundError("User not found")
        logger.info("Account deactivated: %s", user.id)

    def check_email(self, email: str) -> EmailAvailabilityResponse:
        email = email.lower()
        return EmailAvailabilityResponse(
            email=email, is_available=self.repo.get_user_by_email(email) is None
        )

    def check_username(self, username: str) -> UsernameAvailabilityResponse:
        username = username.strip().lower()
        return UsernameAvailabilityResponse(
            username=username, is_available=self.repo.get_user_by_username(username) is None
        )

    # -- Internal helpers --
    @cached_property
    def _dummy_hash(self) -> str:
        return hash_password(uuid4().hex, self.bcrypt_rounds)

    def _active_user(self, user_id: UUID) -> UserModel:
        user = self.repo.get_user(user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Invalid or expired token")
        return user


def to_user_response(user: UserModel) -> UserResponse:
    """Public view of a user: everything but the password hash."""
    return UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        elo=user.elo,
        level=user.level,
        subscription_type=user.subscription_type,
        avatar=user.avatar,
        is_active=user.is_active,
        email_verified=user.email_verified,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )
