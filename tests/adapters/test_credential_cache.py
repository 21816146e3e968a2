"""Tests for the bearer token cache."""

import base64
import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from cab_booking.adapters.auth.credential_cache import CredentialCache, _Refresh
from cab_booking.config import AuthConfig
from cab_booking.domain.errors import (
    ConfigurationError,
    ExpiredAndUnrefreshable,
    InvalidSigningResponse,
    SigningEndpointUnreachable,
)

NOW = 1_800_000_000.0


def jwt_with_exp(exp, tag="t"):
    def segment(data):
        return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()

    return f"{segment({'alg': 'HS256'})}.{segment({'exp': exp, 'jti': tag})}.sig"


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class ScriptedSigner:
    """Signer returning or raising the queued outcomes in order."""

    def __init__(self, *outcomes, delay=0.0, gate=None):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.gate = gate
        self.calls = 0
        self.timeouts = []
        self._lock = threading.Lock()

    def fetch_token(self, timeout=None):
        with self._lock:
            self.calls += 1
            self.timeouts.append(timeout)
            outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if self.gate is not None:
            self.gate.wait(5)
        if self.delay:
            time.sleep(self.delay)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def clock():
    return FakeClock()


def make_cache(signer, clock, **config):
    return CredentialCache(signer=signer, config=AuthConfig(**config), clock=clock)


class TestFreshness:
    """Hits, misses and expiry bookkeeping."""

    def test_first_call_fetches_and_second_hits(self, clock):
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(token)
        cache = make_cache(signer, clock)

        assert cache.get_token() == token
        assert cache.get_token() == token
        assert signer.calls == 1
        assert cache.stats() == {"hits": 1, "refreshes": 1, "expires_at": NOW + 900}

    def test_expiry_comes_from_exp_claim(self, clock):
        cache = make_cache(ScriptedSigner(jwt_with_exp(NOW + 300)), clock)
        cache.get_token()
        assert cache.current().expires_at == NOW + 300

    def test_unreadable_expiry_uses_default_lifetime(self, clock):
        cache = make_cache(ScriptedSigner("opaque-token"), clock)

        assert cache.get_token() == "opaque-token"
        assert cache.current().expires_at == NOW + 840

    def test_token_inside_safety_margin_is_refreshed(self, clock):
        first, second = jwt_with_exp(NOW + 900, "a"), jwt_with_exp(NOW + 2000, "b")
        signer = ScriptedSigner(first, second)
        cache = make_cache(signer, clock)

        assert cache.get_token() == first
        clock.advance(840)  # 60s left, not more than the margin
        assert cache.get_token() == second
        assert signer.calls == 2

    def test_token_just_outside_margin_is_reused(self, clock):
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(token)
        cache = make_cache(signer, clock)

        cache.get_token()
        clock.advance(839)
        assert cache.get_token() == token
        assert signer.calls == 1

    def test_already_expired_signed_token_is_refreshed_next_time(self, clock):
        stale, fresh = jwt_with_exp(NOW - 10, "a"), jwt_with_exp(NOW + 900, "b")
        signer = ScriptedSigner(stale, fresh)
        cache = make_cache(signer, clock)

        assert cache.get_token() == stale
        assert cache.get_token() == fresh
        assert signer.calls == 2

    def test_invalidate_forces_refresh(self, clock):
        signer = ScriptedSigner(jwt_with_exp(NOW + 900, "a"), jwt_with_exp(NOW + 900, "b"))
        cache = make_cache(signer, clock)

        cache.get_token()
        cache.invalidate()
        assert cache.current() is None
        cache.get_token()
        assert signer.calls == 2

    def test_timeout_is_passed_to_signer(self, clock):
        signer = ScriptedSigner(jwt_with_exp(NOW + 900))
        cache = make_cache(signer, clock, refresh_timeout_seconds=7)

        cache.get_token()
        cache.invalidate()
        cache.get_token(timeout=2.5)
        assert signer.timeouts == [7, 2.5]


class TestFailures:
    """Refresh failures and fallback to the cached token."""

    def test_unreachable_with_unexpired_token_reuses_it(self, clock):
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(token, SigningEndpointUnreachable("down"))
        cache = make_cache(signer, clock)

        cache.get_token()
        clock.advance(870)  # inside the margin, not yet expired
        assert cache.get_token() == token
        assert cache.current().token == token

    def test_unreachable_with_expired_token_raises(self, clock):
        signer = ScriptedSigner(jwt_with_exp(NOW + 900), SigningEndpointUnreachable("down"))
        cache = make_cache(signer, clock)

        cache.get_token()
        clock.advance(900)
        with pytest.raises(ExpiredAndUnrefreshable) as exc_info:
            cache.get_token()
        assert isinstance(exc_info.value.cause, SigningEndpointUnreachable)
        assert not exc_info.value.retryable

    def test_unreachable_with_nothing_cached_raises(self, clock):
        cache = make_cache(ScriptedSigner(SigningEndpointUnreachable("down")), clock)

        with pytest.raises(SigningEndpointUnreachable):
            cache.get_token()
        assert cache.current() is None

    def test_invalid_response_propagates_and_keeps_previous(self, clock):
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(token, InvalidSigningResponse("no token", status_code=403))
        cache = make_cache(signer, clock)

        cache.get_token()
        clock.advance(870)
        with pytest.raises(InvalidSigningResponse):
            cache.get_token()
        assert cache.current().token == token

    def test_configuration_error_propagates(self, clock):
        cache = make_cache(ScriptedSigner(ConfigurationError("no key")), clock)
        with pytest.raises(ConfigurationError):
            cache.get_token()

    def test_refresh_settled_without_token_raises_typed_error(self, clock):
        cache = make_cache(ScriptedSigner("unused"), clock)
        flight = _Refresh(done=True)

        with cache._cond:
            with pytest.raises(ExpiredAndUnrefreshable, match="without a token"):
                cache._await(flight, 0.01)

    def test_failed_refresh_is_retried_on_next_call(self, clock):
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(InvalidSigningResponse("bad"), token)
        cache = make_cache(signer, clock)

        with pytest.raises(InvalidSigningResponse):
            cache.get_token()
        assert cache.get_token() == token


class TestConcurrency:
    """Single-flight refresh."""

    def test_fifty_concurrent_callers_trigger_one_refresh(self, clock):
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(token, delay=0.2)
        cache = make_cache(signer, clock)
        barrier = threading.Barrier(50)

        def call():
            barrier.wait(5)
            return cache.get_token()

        with ThreadPoolExecutor(max_workers=50) as pool:
            results = list(pool.map(lambda _: call(), range(50)))

        assert results == [token] * 50
        assert signer.calls == 1

    def test_waiters_receive_leaders_error(self, clock):
        gate = threading.Event()
        signer = ScriptedSigner(InvalidSigningResponse("bad"), gate=gate)
        cache = make_cache(signer, clock)
        errors = []

        def call():
            try:
                cache.get_token()
            except InvalidSigningResponse as e:
                errors.append(e)

        threads = [threading.Thread(target=call) for _ in range(10)]
        for t in threads:
            t.start()
        time.sleep(0.2)
        gate.set()
        for t in threads:
            t.join(5)

        assert len(errors) == 10
        assert cache.current() is None

    def _start_leader(self, cache, signer, calls):
        leader = threading.Thread(target=cache.get_token)
        leader.start()
        deadline = time.monotonic() + 5
        while signer.calls < calls and time.monotonic() < deadline:
            time.sleep(0.01)
        return leader

    def test_waiting_is_bounded_by_timeout(self, clock):
        """With nothing cached, a timed-out wait raises a retryable error."""
        gate = threading.Event()
        token = jwt_with_exp(NOW + 900)
        signer = ScriptedSigner(token, gate=gate)
        cache = make_cache(signer, clock)

        leader = self._start_leader(cache, signer, calls=1)
        try:
            with pytest.raises(SigningEndpointUnreachable, match="Timed out") as exc_info:
                cache.get_token(timeout=0.05)
            assert exc_info.value.retryable
        finally:
            gate.set()
            leader.join(5)

        assert cache.get_token() == token
        assert signer.calls == 1

    def test_timed_out_wait_reuses_unexpired_token(self, clock):
        """A token inside the safety margin still serves callers while a slow refresh runs."""
        gate = threading.Event()
        gate.set()
        first, second = jwt_with_exp(NOW + 900, "a"), jwt_with_exp(NOW + 2000, "b")
        signer = ScriptedSigner(first, second, gate=gate)
        cache = make_cache(signer, clock)
        cache.get_token()

        gate.clear()
        clock.advance(870)  # 30s left
        leader = self._start_leader(cache, signer, calls=2)
        try:
            assert cache.get_token(timeout=0.05) == first
        finally:
            gate.set()
            leader.join(5)

        assert cache.get_token() == second

    def test_timed_out_wait_with_expired_token_raises_retryable(self, clock):
        gate = threading.Event()
        gate.set()
        signer = ScriptedSigner(jwt_with_exp(NOW + 900, "a"), jwt_with_exp(NOW + 2000, "b"), gate=gate)
        cache = make_cache(signer, clock)
        cache.get_token()

        gate.clear()
        clock.advance(900)
        leader = self._start_leader(cache, signer, calls=2)
        try:
            with pytest.raises(SigningEndpointUnreachable) as exc_info:
                cache.get_token(timeout=0.05)
            assert exc_info.value.retryable
        finally:
            gate.set()
            leader.join(5)
