# campaign_service/services/analysis_poller.py
"""
Client side of the optimal time analysis contract.

Triggers an analysis over HTTP and polls the job until it settles or the
maximum number of attempts is reached. Running out of attempts is not a failure: the
server keeps working and the outcome reports the job as still processing.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import httpx

from campaign_service.core.config import settings
from campaign_service.models.enums import AnalysisJobStatus

logger = logging.getLogger(__name__)


@dataclass
class PollOutcome:
    job_id: Optional[str]
    status: Optional[AnalysisJobStatus]
    attempts: int = 0
    still_processing: bool = False
    error: Optional[Dict[str, Any]] = None
    job: Dict[str, Any] = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.status == AnalysisJobStatus.COMPLETED


class AnalysisPoller:
    def __init__(
        self,
        base_url: str,
        token: str,
        interval_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval_seconds = (
            settings.ANALYSIS_POLL_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        )
        self.max_attempts = settings.ANALYSIS_POLL_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.client = client or httpx.Client(base_url=base_url, timeout=30.0)
        self.headers = {"Authorization": f"Bearer {token}"}
        self.sleep = sleep

    def trigger(self) -> httpx.Response:
        return self.client.post("/api/v1/schedule/analyze", headers=self.headers)

    def fetch_job(self, job_id: str) -> Dict[str, Any]:
        response = self.client.get(f"/api/v1/schedule/analyze/{job_id}", headers=self.headers)
        response.raise_for_status()
        return response.json()

    def run(self) -> PollOutcome:
        """
        Trigger an analysis and wait for it.

        A rejected trigger (e.g. insufficient data) is returned as an outcome
        with `error` set; other HTTP errors propagate.
        """
        response = self.trigger()
        if response.status_code == 422:
            body = response.json()
            logger.info("Analysis rejected: %s", body.get("error"))
            return PollOutcome(job_id=None, status=None, error=body)
        response.raise_for_status()

        job = response.json()
        job_id = job["jobId"]
        status = AnalysisJobStatus(job["status"])
        attempts = 0
        while not self._settled(status) and attempts < self.max_attempts:
            self.sleep(self.interval_seconds)
            attempts += 1
            job = self.fetch_job(job_id)
            status = AnalysisJobStatus(job["status"])
            logger.debug("Analysis job %s is %s after %d polls", job_id, status.value, attempts)

        outcome = PollOutcome(
            job_id=job_id,
            status=status,
            attempts=attempts,
            still_processing=not self._settled(status),
            job=job,
        )
        if outcome.still_processing:
            logger.info("Analysis job %s still processing after %d polls", job_id, attempts)
        return outcome

    @staticmethod
    def _settled(status: AnalysisJobStatus) -> bool:
        return not status.is_active

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "AnalysisPoller":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
