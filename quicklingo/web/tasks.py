"""
Background translation jobs.

Each job runs TranslationCoordinator.translate() on its own event loop in a
daemon thread and writes to the single panel owned by the runner. Cancel
requests arrive from request threads and go through the job's
CancellationHandle.
"""

from __future__ import annotations

import asyncio
import threading
import time
import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Optional

from quicklingo.config import load_config, get_timeout
from quicklingo.logger import get_logger
from quicklingo.ai.cancellation import CancellationHandle
from quicklingo.ai.models import Cancelled, Failed, Success, TimedOut, TranslationOutcome
from quicklingo.translation.coordinator import TranslationCoordinator
from quicklingo.translation.panel import PanelOwner, ResultPanel

logger = get_logger(__name__)

_JOB_RETENTION_SECONDS = 600  # Retain job info for 10 minutes after completion
_PREVIOUS_JOB_JOIN_SECONDS = 5.0

FINISHED_STATES = ("completed", "failed", "cancelled", "timed_out")


@dataclass
class TranslationJob:
    """In-memory representation of one background translation."""

    job_id: str
    text_length: int
    handle: CancellationHandle = field(repr=False)
    state: str = "pending"  # pending|running|completed|failed|cancelled|timed_out
    cancel_requested: bool = False
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    outcome: Optional[str] = None
    error: Optional[str] = None
    last_update: float = field(default_factory=time.time)
    thread: Optional[threading.Thread] = field(default=None, repr=False)

    @property
    def finished(self) -> bool:
        return self.state in FINISHED_STATES

    def request_cancel(self):
        """Fire the user cancel trigger of this job."""
        self.cancel_requested = True
        self.last_update = time.time()
        self.handle.cancel()

    def to_dict(self) -> Dict[str, Any]:
        # asdict() would deep-copy the handle and thread
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("handle", "thread")
        }


def _outcome_state(outcome: TranslationOutcome) -> str:
    if isinstance(outcome, Success):
        return "completed"
    if isinstance(outcome, TimedOut):
        return "timed_out"
    if isinstance(outcome, Cancelled):
        return "cancelled"
    return "failed"


class TranslationJobRunner:
    """
    Owns the result panel and the jobs writing to it.

    Only one job writes to the panel at a time: starting a new job cancels
    the running one and waits for it to finish first.
    """

    def __init__(
        self,
        coordinator: Optional[TranslationCoordinator] = None,
        panel_owner: Optional[PanelOwner] = None,
        config_provider: Callable[[], Dict[str, Any]] = load_config,
    ):
        self.coordinator = coordinator or TranslationCoordinator(config_provider=config_provider)
        self.panel_owner = panel_owner or PanelOwner()
        self._config_provider = config_provider
        self._jobs: Dict[str, TranslationJob] = {}
        self._jobs_lock = threading.Lock()
        self._active_job_id: Optional[str] = None
        # Serializes start() and dispose_panel(): one job writes to the panel at a time
        self._start_lock = threading.Lock()

    def start(self, text: str) -> TranslationJob:
        """Create and launch a translation job for *text* on the owned panel."""
        config = self._config_provider()
        with self._start_lock:
            previous = self._take_active_job()
            if previous is not None:
                logger.info("Cancelling job %s to start a new translation", previous.job_id)
                previous.request_cancel()
                self._join_job(previous)

            panel = self.panel_owner.reveal()
            panel.clear()

            job = TranslationJob(
                job_id=uuid.uuid4().hex,
                text_length=len(text or ""),
                handle=CancellationHandle(get_timeout(config)),
            )
            job.thread = threading.Thread(
                target=self._run_job,
                args=(job, text, config, panel),
                name=f"translation-job-{job.job_id}",
                daemon=True,
            )

            with self._jobs_lock:
                self._cleanup_jobs_locked()
                self._jobs[job.job_id] = job
                self._active_job_id = job.job_id

            job.thread.start()
        logger.info("Translation job %s started (chars=%s)", job.job_id, job.text_length)
        return job

    def get(self, job_id: str) -> Optional[TranslationJob]:
        """Fetch a job by ID (if still retained)."""
        with self._jobs_lock:
            job = self._jobs.get(job_id)
            if job and job.finished_at and (time.time() - job.finished_at) > _JOB_RETENTION_SECONDS:
                self._jobs.pop(job_id, None)
                return None
            return job

    def cancel(self, job_id: str) -> bool:
        """
        Request cancellation of a running job.

        Returns:
            True if job was found and cancellation requested, False otherwise.
        """
        with self._jobs_lock:
            job = self._jobs.get(job_id)
            if not job or job.finished:
                return False
        job.request_cancel()
        logger.info("Cancellation requested for job %s", job_id)
        return True

    def dispose_panel(self) -> bool:
        """Cancel the running job, if any, and dispose the panel."""
        with self._start_lock:
            job = self._take_active_job()
            if job is not None:
                job.request_cancel()
            return self.panel_owner.dispose()

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[TranslationJob]:
        """Block until the job's thread finishes. Mostly useful for tests and scripts."""
        job = self.get(job_id)
        if job is not None and job.thread is not None:
            job.thread.join(timeout)
        return job

    @staticmethod
    def _join_job(job: TranslationJob):
        """Wait until *job* can no longer write to the panel."""
        if job.thread is None:
            return
        job.thread.join(_PREVIOUS_JOB_JOIN_SECONDS)
        if job.thread.is_alive():
            # The job's own deadline bounds this wait
            logger.warning(
                "Job %s still running %.0fs after cancel, waiting for it to stop",
                job.job_id,
                _PREVIOUS_JOB_JOIN_SECONDS,
            )
            job.thread.join()

    def _take_active_job(self) -> Optional[TranslationJob]:
        with self._jobs_lock:
            job = self._jobs.get(self._active_job_id) if self._active_job_id else None
            self._active_job_id = None
        if job is None or job.finished:
            return None
        return job

    def _run_job(self, job: TranslationJob, text: str, config: Dict[str, Any], panel: ResultPanel):
        """Worker function executed in a background thread."""
        job.state = "running"
        job.started_at = time.time()
        job.last_update = job.started_at
        try:
            outcome = asyncio.run(self.coordinator.translate(text, panel, config, job.handle))
        except Exception as exc:
            # translate() maps translation problems itself; this is a programming error
            job.state = "failed"
            job.error = f"{type(exc).__name__}: {exc}"
            job.finished_at = time.time()
            job.last_update = job.finished_at
            logger.exception("✗ Translation job %s crashed: %s", job.job_id, job.error)
            return

        job.outcome = type(outcome).__name__
        job.state = _outcome_state(outcome)
        if isinstance(outcome, Failed):
            job.error = f"{outcome.kind.value}: {outcome.message}"
        job.finished_at = time.time()
        job.last_update = job.finished_at
        logger.info(
            "Translation job %s finished (state=%s, duration=%.2fs)",
            job.job_id,
            job.state,
            job.finished_at - job.started_at,
        )

    def _cleanup_jobs_locked(self):
        """Remove finished jobs that exceeded retention period (call with lock held)."""
        now = time.time()
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.finished_at and (now - job.finished_at) > _JOB_RETENTION_SECONDS
        ]
        for job_id in expired:
            self._jobs.pop(job_id, None)


def serialize_job(job: TranslationJob, panel: Optional[ResultPanel], include_history: bool = False) -> Dict[str, Any]:
    """Convert a job and the panel it writes to into a JSON-safe dict."""
    payload = job.to_dict()
    payload["panel"] = panel.to_dict(include_history=include_history) if panel else None
    return payload
