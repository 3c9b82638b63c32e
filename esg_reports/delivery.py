"""
Two-tier delivery of a finished artifact.

The primary path hands the bytes to the target directly. If that raises,
the artifact is re-encoded as a base64 data URL and offered once more. A
second failure produces a user-visible alert and is never re-raised: the
artifact exists, only its delivery failed.
"""

import base64
import html
import logging
import re
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from pathlib import Path
from typing import List, Optional

import streamlit as st

from .config import ARTIFACT_EXTENSION, ARTIFACT_MIME, DOWNLOAD_CLEANUP_DELAY, report_dir
from .context import ReportData
from .errors import DeliveryFailure

logger = logging.getLogger(__name__)

FAILURE_NOTICE = "Download failed. Please try again or check your browser settings."


class DeliveryResult(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    FAILED = "failed"


def normalize_filename(filename: str, extension: str = ARTIFACT_EXTENSION) -> str:
    """Append `extension` when missing instead of rejecting the name."""
    name = (filename or "").strip() or "report"
    if not name.lower().endswith(extension.lower()):
        name += extension
    return name


def build_report_filename(data: ReportData, day: Optional[date] = None) -> str:
    day = day or date.today()
    parts = [data.organization_name, data.module, data.report_type.value, "Report", day.isoformat()]
    stem = "_".join(p for p in parts if p)
    stem = re.sub(r"[^A-Za-z0-9._-]+", "-", stem).strip("-")
    return normalize_filename(stem)


def to_data_url(artifact: bytes, mime: str = ARTIFACT_MIME) -> str:
    encoded = base64.b64encode(artifact).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def from_data_url(data_url: str) -> bytes:
    header, _, encoded = data_url.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise DeliveryFailure("Unsupported data URL")
    return base64.b64decode(encoded)


class DeliveryTarget(ABC):
    """Where an artifact is handed to the user. Implementations raise on failure."""

    @abstractmethod
    def deliver(self, artifact: bytes, filename: str) -> None:
        """Primary path: hand over the raw bytes."""

    @abstractmethod
    def deliver_data_url(self, data_url: str, filename: str) -> None:
        """Fallback path: hand over a base64 data URL."""

    @abstractmethod
    def alert(self, message: str) -> None: ...


class StreamlitDelivery(DeliveryTarget):
    """Offers the artifact inside a Streamlit page."""

    def __init__(self, label: str = "Download report", key: Optional[str] = None):
        self.label = label
        self.key = key

    def deliver(self, artifact: bytes, filename: str) -> None:
        st.download_button(
            label=self.label,
            data=artifact,
            file_name=filename,
            mime=ARTIFACT_MIME,
            key=self.key,
        )

    def deliver_data_url(self, data_url: str, filename: str) -> None:
        st.markdown(
            f'<a href="{html.escape(data_url, quote=True)}" download="{html.escape(filename, quote=True)}">'
            f"{html.escape(self.label)}</a>",
            unsafe_allow_html=True,
        )

    def alert(self, message: str) -> None:
        st.error(message)


class DirectoryDelivery(DeliveryTarget):
    """
    Writes artifacts into a directory. The primary path stages the bytes in
    a temporary directory and moves them into place; the staging directory
    is removed later on a timer that nobody waits for.
    """

    def __init__(self, directory: Optional[Path] = None, cleanup_delay: float = DOWNLOAD_CLEANUP_DELAY):
        self.directory = Path(directory) if directory else report_dir()
        self.cleanup_delay = cleanup_delay
        self.alerts: List[str] = []
        self.delivered: List[Path] = []

    def _schedule_cleanup(self, staging: Path) -> threading.Timer:
        timer = threading.Timer(self.cleanup_delay, shutil.rmtree, args=(staging,), kwargs={"ignore_errors": True})
        timer.daemon = True
        timer.start()
        return timer

    def deliver(self, artifact: bytes, filename: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix="esg-download-"))
        try:
            staged = staging / filename
            staged.write_bytes(artifact)
            target = self.directory / filename
            shutil.move(str(staged), str(target))
        finally:
            self._schedule_cleanup(staging)
        self.delivered.append(target)

    def deliver_data_url(self, data_url: str, filename: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / filename
        target.write_bytes(from_data_url(data_url))
        self.delivered.append(target)

    def alert(self, message: str) -> None:
        logger.error("Delivery alert: %s", message)
        self.alerts.append(message)


def download_artifact(artifact: bytes, filename: str, target: DeliveryTarget) -> DeliveryResult:
    """Deliver `artifact` as `filename` through `target`, falling back once to a data URL."""
    safe_name = normalize_filename(filename)
    try:
        target.deliver(artifact, safe_name)
        logger.info("Delivered %s (%d bytes)", safe_name, len(artifact))
        return DeliveryResult.PRIMARY
    except Exception as exc:
        logger.warning("Primary delivery of %s failed: %s; trying data URL", safe_name, exc)

    try:
        target.deliver_data_url(to_data_url(artifact), safe_name)
        logger.info("Delivered %s via data URL fallback", safe_name)
        return DeliveryResult.FALLBACK
    except Exception as exc:
        logger.error("Fallback delivery of %s failed: %s", safe_name, exc)

    try:
        target.alert(FAILURE_NOTICE)
    except Exception:
        logger.exception("Could not show delivery failure notice for %s", safe_name)
    return DeliveryResult.FAILED
