"""
Tests for services/password_reset_service.py - request, verify and reset flows.
"""

import threading

import pytest

from app.core.exceptions import AuthProviderError, InvalidResetCode
from app.core.security import verify_password
from app.repositories.user_repo import UserRepository
from app.services import password_reset_service
from app.services.password_reset_service import PasswordResetService


class TestRequestFlow:
    """Issuing and emailing codes."""

    async def test_known_email_gets_a_code(self, db_session, user, sent_emails):
        service = PasswordResetService(db_session)

        await service.request_flow("user@example.com")

        assert len(sent_emails) == 1
        assert sent_emails[0]["email"] == "user@example.com"
        assert sent_emails[0]["expires_in_minutes"] == 15
        assert await service.verify(user.id, sent_emails[0]["code"])

    async def test_lookup_ignores_case(self, db_session, user, sent_emails):
        service = PasswordResetService(db_session)

        await service.request_flow("USER@Example.com")

        assert len(sent_emails) == 1

    async def test_unknown_email_returns_quietly(self, db_session, user, sent_emails):
        service = PasswordResetService(db_session)

        assert await service.request_flow("nobody@example.com") is None
        assert sent_emails == []

    async def test_inactive_account_gets_nothing(self, db_session, user, sent_emails):
        await UserRepository(db_session).update(user.id, is_active=False)
        service = PasswordResetService(db_session)

        await service.request_flow("user@example.com")

        assert sent_emails == []

    async def test_email_failure_does_not_fail_request(self, db_session, user, monkeypatch):
        def broken_send(email, code, expires_in_minutes=15):
            raise RuntimeError("smtp down")

        monkeypatch.setattr(password_reset_service, "send_password_reset_code", broken_send)
        service = PasswordResetService(db_session)

        await service.request_flow("user@example.com")

        assert len(await service.reset_repo.get_outstanding(user.id)) == 1

    async def test_inline_delivery_runs_off_the_event_loop(self, db_session, user, monkeypatch):
        threads = []

        def recording_send(email, code, expires_in_minutes=15):
            threads.append(threading.get_ident())
            return True

        monkeypatch.setattr(password_reset_service, "send_password_reset_code", recording_send)
        service = PasswordResetService(db_session)

        await service.request_flow("user@example.com")

        assert len(threads) == 1
        assert threads[0] != threading.get_ident()


class TestResetFlow:
    """Spending codes and replacing passwords."""

    async def test_end_to_end(self, db_session, user, user_password):
        """Issue, verify, consume with password change, then the code is dead."""
        service = PasswordResetService(db_session)
        await service.issue(user.id, "482913")

        assert await service.verify_flow("user@example.com", "482913") is True

        await service.reset_flow("user@example.com", "482913", "BrandNew456")

        refreshed = await UserRepository(db_session).get_by_id(user.id)
        assert verify_password("BrandNew456", refreshed.password_hash)
        assert not verify_password(user_password, refreshed.password_hash)
        assert await service.verify(user.id, "482913") is False
        assert await service.consume(user.id, "482913") is False

    async def test_unknown_email_is_invalid_code(self, db_session, user):
        service = PasswordResetService(db_session)

        with pytest.raises(InvalidResetCode):
            await service.reset_flow("nobody@example.com", "482913", "BrandNew456")

    async def test_wrong_code_is_invalid_code(self, db_session, user):
        service = PasswordResetService(db_session)
        await service.issue(user.id, "482913")

        with pytest.raises(InvalidResetCode):
            await service.reset_flow("user@example.com", "111111", "BrandNew456")

    async def test_reused_code_is_invalid_code(self, db_session, user):
        service = PasswordResetService(db_session)
        await service.issue(user.id, "482913")
        await service.reset_flow("user@example.com", "482913", "BrandNew456")

        with pytest.raises(InvalidResetCode):
            await service.reset_flow("user@example.com", "482913", "Another789")

    async def test_lost_consume_race_is_invalid_code(self, db_session, user, monkeypatch):
        service = PasswordResetService(db_session)
        await service.issue(user.id, "482913")

        async def lost_race(user_id, code):
            return False

        monkeypatch.setattr(service, "consume", lost_race)

        with pytest.raises(InvalidResetCode):
            await service.reset_flow("user@example.com", "482913", "BrandNew456")

    async def test_verify_flow_unknown_email(self, db_session, user):
        service = PasswordResetService(db_session)
        assert await service.verify_flow("nobody@example.com", "482913") is False

    async def test_verify_flow_inactive_account(self, db_session, user):
        service = PasswordResetService(db_session)
        await service.issue(user.id, "482913")
        await UserRepository(db_session).update(user.id, is_active=False)

        assert await service.verify_flow("user@example.com", "482913") is False
        assert await service.verify(user.id, "482913") is True


class TestResetPassword:
    """The account store side of a reset."""

    async def test_missing_account(self, db_session):
        service = PasswordResetService(db_session)

        with pytest.raises(AuthProviderError):
            await service.reset_password("00000000-0000-0000-0000-000000000000", "BrandNew456")

    async def test_inactive_account(self, db_session, user):
        await UserRepository(db_session).update(user.id, is_active=False)
        service = PasswordResetService(db_session)

        with pytest.raises(AuthProviderError):
            await service.reset_password(user.id, "BrandNew456")
