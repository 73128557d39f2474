import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from supabase import AuthError

from modules.auth.service import AuthService
from modules.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
)

from tests.fakes import TEST_JWT_SECRET, create_test_token


class TestAuthService:
    @pytest.fixture
    def db(self):
        db = MagicMock()
        db.auth.sign_in_with_password = AsyncMock()
        db.auth.sign_out = AsyncMock()
        return db

    @pytest.fixture
    def service(self, db):
        """Create auth service with mocked dependencies."""
        with patch("modules.auth.service.get_settings") as mock_settings:
            mock_settings.return_value.supabase_jwt_secret = TEST_JWT_SECRET
            yield AuthService(db)

    @pytest.mark.asyncio
    async def test_validate_valid_token(self, service, auth_token, test_user_id, test_user_email):
        """Should validate a valid token and return user."""
        user = await service.validate_token(auth_token)
        assert user.id == test_user_id
        assert user.email == test_user_email
        assert user.email_verified is True
        assert user.role == "user"

    @pytest.mark.asyncio
    async def test_unverified_email(self, service):
        user = await service.validate_token(create_test_token(email_verified=False))
        assert user.email_verified is False

    @pytest.mark.asyncio
    async def test_validate_expired_token(self, service):
        """Should raise ExpiredTokenError for expired token."""
        with pytest.raises(ExpiredTokenError):
            await service.validate_token(create_test_token(expired=True))

    @pytest.mark.asyncio
    async def test_validate_invalid_token(self, service):
        """Should raise InvalidTokenError for malformed token."""
        with pytest.raises(InvalidTokenError):
            await service.validate_token("not-a-valid-token")

    @pytest.mark.asyncio
    async def test_validate_missing_token(self, service):
        """Should raise MissingTokenError for empty or None token."""
        with pytest.raises(MissingTokenError):
            await service.validate_token("")
        with pytest.raises(MissingTokenError):
            await service.validate_token(None)

    @pytest.mark.asyncio
    async def test_validate_wrong_secret(self, service):
        """Should raise InvalidTokenError for token signed with wrong secret."""
        with pytest.raises(InvalidTokenError):
            await service.validate_token(create_test_token(secret="wrong-secret"))

    @pytest.mark.asyncio
    async def test_sign_in_returns_session(self, service, db):
        token = create_test_token(user_id="user-9")
        db.auth.sign_in_with_password.return_value = MagicMock(
            session=MagicMock(access_token=token, refresh_token="refresh")
        )

        session = await service.sign_in("test@example.com", "pw")

        db.auth.sign_in_with_password.assert_awaited_once_with(
            {"email": "test@example.com", "password": "pw"}
        )
        assert session.user.id == "user-9"
        assert session.refresh_token == "refresh"

    @pytest.mark.asyncio
    async def test_sign_in_rejected(self, service, db):
        db.auth.sign_in_with_password.side_effect = AuthError("Invalid login credentials", None)
        with pytest.raises(InvalidCredentialsError):
            await service.sign_in("test@example.com", "bad")

    @pytest.mark.asyncio
    async def test_sign_in_without_session(self, service, db):
        db.auth.sign_in_with_password.return_value = MagicMock(session=None)
        with pytest.raises(InvalidCredentialsError):
            await service.sign_in("test@example.com", "pw")

    @pytest.mark.asyncio
    async def test_sign_out(self, service, db):
        await service.sign_out()
        db.auth.sign_out.assert_awaited_once()
