import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import report_dir as default_report_dir
from .context import ReportConfig, ReportData

logger = logging.getLogger(__name__)


def save_report_pdf(
    report_id: str,
    pdf_bytes: bytes,
    data: ReportData,
    config: ReportConfig,
    page_count: Optional[int] = None,
    report_dir: Optional[Path] = None,
) -> Path:
    """
    Persist a generated PDF and a small metadata sidecar under the report dir.
    Returns the PDF path.
    """
    report_dir = report_dir or default_report_dir()
    report_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = report_dir / f"{report_id}.pdf"
    meta_path = report_dir / f"{report_id}.json"

    pdf_path.write_bytes(pdf_bytes)

    metadata = {
        "report_id": report_id,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "organization_name": data.organization_name,
        "report_type": data.report_type.value,
        "module": data.module,
        "period": data.period,
        "report_title": config.title,
        "framework": config.framework,
        "page_count": page_count,
        "size_bytes": len(pdf_bytes),
        "path": str(pdf_path),
    }
    try:
        meta_path.write_text(json.dumps(metadata, indent=2))
    except (OSError, TypeError, ValueError):
        # Metadata failures should not block PDF saving.
        logger.warning("Could not write report metadata %s", meta_path, exc_info=True)
    return pdf_path


def load_report_metadata(report_id: str, report_dir: Optional[Path] = None) -> Optional[dict]:
    meta_path = (report_dir or default_report_dir()) / f"{report_id}.json"
    if not meta_path.exists():
        return None
    return json.loads(meta_path.read_text())
