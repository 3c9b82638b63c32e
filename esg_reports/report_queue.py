import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional

from .context import ReportConfig, ReportData, report_id
from .engine import ReportEngine
from .report_store import save_report_pdf

logger = logging.getLogger(__name__)

Builder = Callable[[ReportData, ReportConfig], Path]


def generate_and_store(
    data: ReportData, config: ReportConfig, report_dir: Optional[Path] = None
) -> Path:
    """Default job body: run a fresh engine and persist the artifact."""
    result = ReportEngine().render_artifact(data, config)
    return save_report_pdf(
        report_id(data, config),
        result.content,
        data,
        config,
        page_count=result.page_count,
        report_dir=report_dir,
    )


@dataclass
class ReportJob:
    id: str
    data: ReportData
    config: ReportConfig
    status: str = "submitted"
    result_path: Optional[str] = None
    error: Optional[str] = None
    future: Optional[Future] = field(default=None, repr=False)


class ReportQueue:
    """
    Threaded queue so batches of PDFs can be generated without blocking the UI.
    Every job builds its own engine run; nothing is shared between jobs.
    """

    def __init__(self, max_workers: int = 2, builder: Builder = generate_and_store):
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="report")
        self.builder = builder
        self.jobs: Dict[str, ReportJob] = {}
        self.lock = threading.Lock()

    def submit(self, data: ReportData, config: ReportConfig) -> str:
        job_id = uuid.uuid4().hex[:12]
        job = ReportJob(id=job_id, data=data, config=config, status="queued")
        with self.lock:
            self.jobs[job_id] = job
        job.future = self.executor.submit(self._run_job, job_id)
        return job_id

    def _run_job(self, job_id: str) -> None:
        with self.lock:
            job = self.jobs[job_id]
            job.status = "running"
        try:
            path = self.builder(job.data, job.config)
        except Exception as exc:
            logger.exception("Report job %s failed", job_id)
            with self.lock:
                job.status = "failed"
                job.error = str(exc)
            return
        with self.lock:
            job.status = "completed"
            job.result_path = str(path)

    def get(self, job_id: str) -> Optional[ReportJob]:
        with self.lock:
            return self.jobs.get(job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[ReportJob]:
        job = self.get(job_id)
        if job is not None and job.future is not None:
            job.future.result(timeout=timeout)
        return job

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
