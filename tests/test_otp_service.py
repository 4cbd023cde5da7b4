"""Tests for one-time code issuance, verification and cleanup."""

from datetime import timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy.orm import Query

from db import SessionLocal
from models import OtpToken, OtpPurpose
from routes.maintenance import cleanup_otps
from services import otp_service
from services.otp_service import issue_otp, verify_otp, cleanup_expired_otps


def _tokens(email):
    with SessionLocal() as db:
        return db.query(OtpToken).filter(OtpToken.email == email).order_by(OtpToken.created_at).all()


def _expire_all(email):
    with SessionLocal() as db:
        db.query(OtpToken).filter(OtpToken.email == email).update(
            {OtpToken.expires_at: otp_service._utcnow() - timedelta(minutes=1)},
            synchronize_session=False,
        )
        db.commit()


class TestIssueOtp:
    def test_code_is_six_digits(self, outbox):
        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)

        assert len(code) == 6
        assert code.isdigit()
        outbox.assert_called_once_with("bob@example.com", code, OtpPurpose.SIGNUP, ttl_minutes=10)

    def test_leading_zeros_are_kept(self):
        with patch("services.otp_service.secrets.randbelow", return_value=42):
            code = issue_otp("bob@example.com", OtpPurpose.LOGIN)

        assert code == "000042"
        assert verify_otp("bob@example.com", "000042", OtpPurpose.LOGIN)

    def test_email_is_lowercased(self):
        code = issue_otp("  Bob@Example.COM ", OtpPurpose.SIGNUP)

        assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP)

    def test_new_code_supersedes_previous(self):
        with patch("services.otp_service._generate_code", side_effect=["111111", "222222"]):
            first = issue_otp("bob@example.com", OtpPurpose.SIGNUP)
            second = issue_otp("bob@example.com", OtpPurpose.SIGNUP)

        assert not verify_otp("bob@example.com", first, OtpPurpose.SIGNUP)
        assert verify_otp("bob@example.com", second, OtpPurpose.SIGNUP)

    def test_only_one_live_code_per_pair(self):
        for _ in range(3):
            issue_otp("bob@example.com", OtpPurpose.LOGIN)

        live = [t for t in _tokens("bob@example.com") if not t.used]
        assert len(live) == 1

    def test_other_purposes_are_not_superseded(self):
        signup = issue_otp("bob@example.com", OtpPurpose.SIGNUP)
        issue_otp("bob@example.com", OtpPurpose.LOGIN)

        assert verify_otp("bob@example.com", signup, OtpPurpose.SIGNUP)

    def test_delivery_failure_keeps_code_valid(self, outbox):
        outbox.side_effect = RuntimeError("SMTP down")

        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)

        assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP)

    def test_expiry_is_ten_minutes_out(self):
        before = otp_service._utcnow()
        issue_otp("bob@example.com", OtpPurpose.SIGNUP)

        token = _tokens("bob@example.com")[0]
        assert timedelta(minutes=9) < token.expires_at - before <= timedelta(minutes=10, seconds=5)


class TestVerifyOtp:
    def test_code_is_single_use(self):
        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)

        assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP) is True
        assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP) is False

    def test_wrong_code_fails(self):
        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)
        wrong = "000000" if code != "000000" else "111111"

        assert verify_otp("bob@example.com", wrong, OtpPurpose.SIGNUP) is False
        assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP) is True

    def test_purpose_must_match(self):
        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)

        assert verify_otp("bob@example.com", code, OtpPurpose.LOGIN) is False

    def test_expired_code_fails(self):
        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)
        _expire_all("bob@example.com")

        assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP) is False

    def test_missing_inputs(self):
        assert verify_otp("", "123456", OtpPurpose.SIGNUP) is False
        assert verify_otp("bob@example.com", "", OtpPurpose.SIGNUP) is False

    def test_concurrent_verifier_wins_race(self):
        """A code consumed after our lookup but before our update is not accepted twice."""
        code = issue_otp("bob@example.com", OtpPurpose.SIGNUP)
        original_scalar = Query.scalar

        def lookup_then_lose_race(query):
            token_id = original_scalar(query)
            if token_id is not None:
                # the other request flips the row first
                query.session.query(OtpToken).filter(OtpToken.id == token_id).update(
                    {OtpToken.used: True}, synchronize_session=False
                )
            return token_id

        with patch.object(Query, "scalar", lookup_then_lose_race):
            assert verify_otp("bob@example.com", code, OtpPurpose.SIGNUP) is False

        assert [t.used for t in _tokens("bob@example.com")] == [True]


class TestCleanup:
    def test_removes_only_expired(self):
        issue_otp("old@example.com", OtpPurpose.SIGNUP)
        _expire_all("old@example.com")
        issue_otp("new@example.com", OtpPurpose.SIGNUP)

        assert cleanup_expired_otps() == 1
        assert _tokens("old@example.com") == []
        assert len(_tokens("new@example.com")) == 1

    def test_timer_function_runs_cleanup(self):
        issue_otp("old@example.com", OtpPurpose.LOGIN)
        _expire_all("old@example.com")

        cleanup_otps.build().get_user_function()(MagicMock(past_due=False))

        assert _tokens("old@example.com") == []
