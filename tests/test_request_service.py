"""Tests for vehicle command issuance."""

import asyncio

import pytest

from bluelink_mcp.services.request_service import (
    ACK_POLL_ATTEMPTS,
    ACK_POLL_INTERVAL_MS,
    MIN_REQUEST_MS,
    RequestTracker,
    get_request_tracker,
    issue_request,
    run_in_background,
)


class TestIssueRequest:
    """Tests for issue_request."""

    @pytest.mark.asyncio
    async def test_returns_message_verbatim(self, fake_clock, fake_client):
        """The confirmation message comes back unchanged."""
        result = await issue_request(fake_client, "lock", "I've issued a request to lock Ioniq.")

        assert result == "I've issued a request to lock Ioniq."

    @pytest.mark.asyncio
    async def test_submits_command_and_payload(self, fake_clock, fake_client):
        """The command type and payload are passed to the client."""
        payload = {"enable": True}
        await issue_request(fake_client, "climate", "ok", payload)

        assert fake_client.requests == [("climate", payload)]

    @pytest.mark.asyncio
    async def test_immediate_ack_still_waits_minimum(self, fake_clock, fake_client):
        """An instant acknowledgement is padded to the minimum duration."""
        await issue_request(fake_client, "lock", "ok")

        assert fake_clock.now == MIN_REQUEST_MS
        assert fake_clock.sleeps == [MIN_REQUEST_MS]

    @pytest.mark.asyncio
    async def test_deferred_ack_padded_to_minimum(self, fake_clock, client_factory):
        """A callback arriving during polling ends the poll; total time is the floor."""
        client = client_factory(ack="deferred")

        result = await issue_request(client, "unlock", "unlocked")

        assert result == "unlocked"
        assert fake_clock.now == MIN_REQUEST_MS
        assert fake_clock.sleeps[0] == ACK_POLL_INTERVAL_MS
        assert len(fake_clock.sleeps) < ACK_POLL_ATTEMPTS

    @pytest.mark.asyncio
    async def test_missing_ack_exhausts_budget_and_still_confirms(self, fake_clock, client_factory):
        """No callback: the poll budget runs out and the message is still returned."""
        client = client_factory(ack="never")

        result = await issue_request(client, "startCharge", "charging")

        assert result == "charging"
        assert fake_clock.sleeps == [ACK_POLL_INTERVAL_MS] * ACK_POLL_ATTEMPTS
        assert fake_clock.now == ACK_POLL_ATTEMPTS * ACK_POLL_INTERVAL_MS

    @pytest.mark.asyncio
    async def test_never_returns_before_minimum(self, fake_clock, client_factory):
        """Whatever the ack behaviour, at least MIN_REQUEST_MS elapses."""
        for ack in ("immediate", "deferred", "never"):
            fake_clock.now = 0.0
            await issue_request(client_factory(ack=ack), "lock", "ok")
            assert fake_clock.now >= MIN_REQUEST_MS, ack

    @pytest.mark.asyncio
    async def test_later_callbacks_reach_tracker(self, fake_clock, client_factory):
        """Completion reported after the first ack is recorded in the tracker."""
        client = client_factory(ack="deferred")

        await issue_request(client, "lock", "ok")
        for _ in range(3):
            await asyncio.sleep(0)

        update = get_request_tracker().get("lock")
        assert update is not None
        assert update.is_complete is True
        assert update.did_succeed is True
        assert update.data == {"result": "ok"}
        assert update.updates == 2

    @pytest.mark.asyncio
    async def test_tracker_shows_pending_without_ack(self, fake_clock, client_factory):
        """A request with no callback is tracked as incomplete."""
        await issue_request(client_factory(ack="never"), "stopCharge", "ok")

        update = get_request_tracker().get("stopCharge")
        assert update.is_complete is False
        assert update.updates == 0


class TestRequestTracker:
    """Tests for RequestTracker."""

    def test_record_counts_updates(self):
        """Each record increments the update count."""
        tracker = RequestTracker()
        tracker.start("climate")
        tracker.record("climate", False, False, None)
        tracker.record("climate", True, False, {"error": "timeout"})

        update = tracker.get("climate")
        assert update.updates == 2
        assert update.is_complete is True
        assert update.did_succeed is False

    def test_start_resets(self):
        """Starting a new request clears the previous result."""
        tracker = RequestTracker()
        tracker.record("lock", True, True, None)
        tracker.start("lock")

        assert tracker.get("lock").updates == 0
        assert tracker.get("lock").is_complete is False

    def test_unknown_command(self):
        """Unknown command types return None."""
        assert RequestTracker().get("climate") is None

    def test_to_dict(self):
        """to_dict is JSON friendly."""
        tracker = RequestTracker()
        tracker.record("lock", True, True, None)

        data = tracker.get("lock").to_dict()
        assert data["command_type"] == "lock"
        assert isinstance(data["updated_at"], str)


class TestRunInBackground:
    """Tests for run_in_background."""

    @pytest.mark.asyncio
    async def test_failure_is_logged(self, caplog):
        """Exceptions from background work are logged, not raised."""
        async def boom():
            raise RuntimeError("offline")

        task = run_in_background(boom(), "remote status refresh")
        await asyncio.gather(task, return_exceptions=True)
        await asyncio.sleep(0)

        assert "remote status refresh failed" in caplog.text
