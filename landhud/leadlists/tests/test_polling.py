import threading

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from landhud.leadlists.polling import HttpStatusFetcher, PollResult, StatusFetchError, StatusPoller


def _api_fetcher(api):
    def _fetch(list_id):
        body = api.get("/v1/lead-lists/status", {"id": list_id}).json()
        if not body.get("success"):
            raise StatusFetchError(body["error"]["message"])
        return body["record"]
    return _fetch


def _poller(fetch, **kwargs):
    kwargs.setdefault("interval", 0)
    kwargs.setdefault("initial_delay", 0)
    kwargs.setdefault("max_attempts", 5)
    return StatusPoller(fetch, **kwargs)


@pytest.mark.django_db
def test_submit_poll_webhook_poll_scenario(api, submit):
    list_id = submit(county="Mohave", state="AZ").json()["recordId"]
    seen = []

    def on_progress(attempt, record, error):
        seen.append(record["status"])
        if record["status"] == "scrubbing":
            api.post(
                "/v1/lead-lists/webhook",
                {"record_id": list_id, "status": "ready", "record_count": 42},
                format="json",
            )

    result = _poller(_api_fetcher(api), on_progress=on_progress).run(list_id)

    assert seen == ["scrubbing", "ready"]
    assert result.outcome == PollResult.OUTCOME_READY
    assert result.record_count == 42
    assert result.attempts == 2
    assert "42" in result.message


@pytest.mark.django_db
def test_poll_surfaces_error_message(api, submit):
    list_id = submit().json()["recordId"]
    api.post("/v1/lead-lists/webhook", {"record_id": list_id, "error_message": "bad format"}, format="json")

    result = _poller(_api_fetcher(api)).run(list_id)
    assert result.outcome == PollResult.OUTCOME_ERROR
    assert result.error_message == "bad format"
    assert result.message == "bad format"
    assert result.attempts == 1


@pytest.mark.django_db
def test_poll_times_out_without_touching_record(api, submit):
    list_id = submit().json()["recordId"]

    result = _poller(_api_fetcher(api), max_attempts=3).run(list_id)
    assert result.outcome == PollResult.OUTCOME_TIMEOUT
    assert result.attempts == 3
    assert result.record["status"] == "scrubbing"

    status = api.get("/v1/lead-lists/status", {"id": list_id}).json()["record"]["status"]
    assert status == "scrubbing"


def test_fetch_failures_spend_budget_but_do_not_abort():
    calls = []

    def flaky(list_id):
        calls.append(list_id)
        if len(calls) < 3:
            raise StatusFetchError("connection reset")
        return {"status": "ready", "recordCount": 1}

    errors = []
    result = _poller(flaky, on_progress=lambda a, r, e: errors.append(e)).run("abc")
    assert result.outcome == PollResult.OUTCOME_READY
    assert result.attempts == 3
    assert [type(e) for e in errors] == [StatusFetchError, StatusFetchError, type(None)]


def test_fetch_failures_alone_end_in_timeout():
    def down(list_id):
        raise StatusFetchError("down")

    result = _poller(down, max_attempts=4).run("abc")
    assert result.outcome == PollResult.OUTCOME_TIMEOUT
    assert result.attempts == 4
    assert result.record is None


def test_cancel_before_first_attempt():
    fetched = []
    event = threading.Event()
    event.set()

    result = _poller(lambda i: fetched.append(i) or {"status": "scrubbing"}, cancel_event=event).run("abc")
    assert result.outcome == PollResult.OUTCOME_CANCELLED
    assert result.attempts == 0
    assert fetched == []


def test_cancel_wakes_a_sleeping_loop():
    started = threading.Event()

    def fetch(list_id):
        started.set()
        return {"status": "scrubbing"}

    poller = _poller(fetch, interval=30, max_attempts=10)
    done = []
    thread = poller.run_in_background("abc", on_done=done.append)

    assert started.wait(5)
    poller.cancel()
    thread.join(5)

    assert not thread.is_alive()
    assert done[0].outcome == PollResult.OUTCOME_CANCELLED
    assert done[0].attempts == 1


def test_independent_loops_do_not_share_state():
    a = _poller(lambda i: {"status": "ready", "recordCount": 1})
    b = _poller(lambda i: {"status": "scrubbing"}, max_attempts=2)
    a.cancel()
    assert b.run("b").outcome == PollResult.OUTCOME_TIMEOUT


def test_progress_callback_errors_are_ignored():
    def broken(attempt, record, error):
        raise RuntimeError("ui gone")

    result = _poller(lambda i: {"status": "ready"}, on_progress=broken).run("abc")
    assert result.outcome == PollResult.OUTCOME_READY


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        StatusPoller(lambda i: {}, max_attempts=0)


def test_http_fetcher_url():
    fetch = HttpStatusFetcher("https://landhud.example/")
    assert fetch.url_for("abc") == "https://landhud.example/v1/lead-lists/status?id=abc"


def test_http_fetcher_rejects_unsuccessful_body():
    # the autouse n8n fake answers every request with "{}"
    with pytest.raises(StatusFetchError):
        HttpStatusFetcher("http://testserver")("abc")


def test_poll_command_reports_timeout():
    with pytest.raises(CommandError):
        call_command(
            "poll_lead_list",
            "abc",
            base_url="http://testserver",
            interval=0,
            initial_delay=0,
            max_attempts=2,
        )
