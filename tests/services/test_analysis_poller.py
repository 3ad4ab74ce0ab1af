import httpx
import pytest

from campaign_service.models.enums import AnalysisJobStatus
from campaign_service.services.analysis_poller import AnalysisPoller

JOB = {
    "jobId": "ajob_1",
    "status": "PENDING",
    "replacesExisting": True,
    "createdAt": "2030-01-01T00:00:00Z",
}


def make_poller(statuses, trigger_status=202, trigger_body=None, max_attempts=24):
    """Poller whose job endpoint walks through `statuses`."""
    remaining = list(statuses)
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "POST":
            return httpx.Response(trigger_status, json=trigger_body or JOB)
        status = remaining.pop(0) if remaining else "RUNNING"
        return httpx.Response(200, json={**JOB, "status": status})

    client = httpx.Client(base_url="http://campaigns.test", transport=httpx.MockTransport(handler))
    sleeps = []
    poller = AnalysisPoller(
        base_url="http://campaigns.test",
        token="token",
        interval_seconds=5,
        max_attempts=max_attempts,
        client=client,
        sleep=sleeps.append,
    )
    return poller, requests, sleeps


def test_polls_until_the_job_completes():
    poller, requests, sleeps = make_poller(["RUNNING", "RUNNING", "COMPLETED"])

    outcome = poller.run()

    assert outcome.completed
    assert not outcome.still_processing
    assert outcome.attempts == 3
    assert sleeps == [5, 5, 5]
    assert requests[0].headers["Authorization"] == "Bearer token"
    assert requests[1].url.path == "/api/v1/schedule/analyze/ajob_1"


def test_timeout_means_still_processing_not_failure():
    poller, requests, sleeps = make_poller([], max_attempts=24)

    outcome = poller.run()

    assert outcome.still_processing
    assert outcome.status == AnalysisJobStatus.RUNNING
    assert outcome.error is None
    assert outcome.attempts == 24
    assert len(sleeps) == 24
    assert len(requests) == 25


def test_failed_job_stops_polling():
    poller, _, sleeps = make_poller(["FAILED"])

    outcome = poller.run()

    assert outcome.status == AnalysisJobStatus.FAILED
    assert not outcome.still_processing
    assert len(sleeps) == 1


def test_rejected_trigger_returns_the_error_body():
    body = {"error": "Insufficient data", "code": "INSUFFICIENT_DATA", "details": {"found": 3}}
    poller, requests, sleeps = make_poller([], trigger_status=422, trigger_body=body)

    outcome = poller.run()

    assert outcome.job_id is None
    assert outcome.error["code"] == "INSUFFICIENT_DATA"
    assert sleeps == []
    assert len(requests) == 1


def test_server_errors_propagate():
    poller, _, _ = make_poller([], trigger_status=503, trigger_body={"error": "queue down"})

    with pytest.raises(httpx.HTTPStatusError):
        poller.run()
