"""Tests for NonceGate."""

import time
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from maillog.app import InMemoryTokenLedger, NonceGate
from maillog.core.exceptions import AuthorizationError, ConfigurationError
from maillog.core.types import MIGRATION_ACTION, AuthorizedRequest

SECRET = "unit-test-signing-key-0123456789abcdef"


@pytest.fixture
def gate() -> NonceGate:
    return NonceGate(SECRET, ttl=3600)


def _encode(**overrides) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "action": MIGRATION_ACTION,
        "sid": "session-1",
        "jti": "fixed-id",
        "iat": now,
        "exp": now + timedelta(hours=1),
    }
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, SECRET, algorithm="HS256")


class TestNonceGate:
    """Tests for issuing and redeeming tokens."""

    def test_issued_token_authorizes(self, gate: NonceGate):
        token = gate.issue("session-1")

        request = gate.authorize(token, "session-1")

        assert request == AuthorizedRequest(
            action=MIGRATION_ACTION, session_id="session-1", token=token
        )

    def test_issued_token_is_hs256_jwt(self, gate: NonceGate):
        token = gate.issue("session-1")

        assert jwt.get_unverified_header(token)["alg"] == "HS256"
        claims = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert claims["action"] == MIGRATION_ACTION
        assert claims["sid"] == "session-1"
        assert claims["exp"] - claims["iat"] == 3600
        assert claims["jti"]

    def test_token_is_single_use(self, gate: NonceGate):
        token = gate.issue("session-1")

        assert gate.authorize(token, "session-1") is not None
        assert gate.authorize(token, "session-1") is None

    def test_tokens_are_unique(self, gate: NonceGate):
        assert gate.issue("session-1") != gate.issue("session-1")

    def test_other_session_rejected(self, gate: NonceGate):
        token = gate.issue("session-1")

        assert gate.authorize(token, "session-2") is None

    def test_other_action_rejected(self, gate: NonceGate):
        token = gate.issue("session-1", "delete_logs")

        assert gate.authorize(token, "session-1") is None
        assert gate.authorize(token, "session-1", "delete_logs") is not None

    def test_other_secret_rejected(self, gate: NonceGate):
        token = NonceGate("another-signing-key-0123456789abcdef").issue("session-1")

        assert gate.authorize(token, "session-1") is None

    def test_expired_token_rejected(self, gate: NonceGate):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = _encode(iat=past, exp=past + timedelta(hours=1))

        assert gate.authorize(token, "session-1") is None

    def test_negative_ttl_issues_expired_tokens(self):
        gate = NonceGate(SECRET, ttl=-10)

        assert gate.authorize(gate.issue("session-1"), "session-1") is None

    def test_unsigned_token_rejected(self, gate: NonceGate):
        now = int(time.time())
        token = jwt.encode(
            {"action": MIGRATION_ACTION, "sid": "session-1", "jti": "x", "iat": now, "exp": now + 60},
            None,
            algorithm="none",
        )

        assert gate.authorize(token, "session-1") is None

    def test_token_without_id_rejected(self, gate: NonceGate):
        assert gate.authorize(_encode(jti=None), "session-1") is None

    @pytest.mark.parametrize("token", [None, "", "abc", "1.2", "x.y.z", "1.2.3.4"])
    def test_malformed_token_rejected(self, gate: NonceGate, token):
        assert gate.authorize(token, "session-1") is None

    def test_verify_does_not_redeem(self, gate: NonceGate):
        token = gate.issue("session-1")

        assert gate.verify(token, "session-1")["sid"] == "session-1"
        assert gate.authorize(token, "session-1") is not None

    def test_empty_secret_is_rejected(self):
        with pytest.raises(ConfigurationError):
            NonceGate("")

    def test_shared_ledger_spans_gates(self):
        """Two gates with the same key and ledger act as one site."""
        ledger = InMemoryTokenLedger()
        render = NonceGate(SECRET, ledger=ledger)
        click = NonceGate(SECRET, ledger=ledger)
        token = render.issue("session-1")

        assert click.authorize(token, "session-1") is not None
        assert render.authorize(token, "session-1") is None

    def test_require_raises(self, gate: NonceGate):
        with pytest.raises(AuthorizationError):
            gate.require("bogus", "session-1")

    def test_require_returns_request(self, gate: NonceGate):
        token = gate.issue("session-1")

        assert gate.require(token, "session-1").token == token


class TestInMemoryTokenLedger:
    """Tests for the process-local ledger."""

    def test_second_consume_fails(self):
        ledger = InMemoryTokenLedger()
        expires = time.time() + 60

        assert ledger.consume("a", expires) is True
        assert ledger.consume("a", expires) is False
        assert ledger.consume("b", expires) is True

    def test_expired_ids_are_pruned(self):
        ledger = InMemoryTokenLedger()
        ledger.consume("old", time.time() - 1)

        ledger.consume("new", time.time() + 60)

        assert len(ledger) == 1
