import os
from pathlib import Path

# Environment overrides for the report store, the metrics table and logging.
ENV_REPORT_DIR = "ESG_REPORT_DIR"
ENV_DATA_PATH = "ESG_DATA_PATH"
ENV_LOG_LEVEL = "ESG_LOG_LEVEL"

# Output locations for PDFs and narrative templates.
DEFAULT_REPORT_DIR = Path(__file__).resolve().parent.parent / "reports"
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
DEFAULT_DATA_FILENAME = "esg_metrics.csv"

# Page geometry in millimetres (A4 portrait).
PAGE_FORMAT = "A4"
TOP_MARGIN = 20
LEFT_MARGIN = 20
RIGHT_MARGIN = 20
BOTTOM_SAFE_MARGIN = 30

# Flow writer spacing.
HEADING_RESERVE = 30
HEADING_ADVANCE = 20
SUBHEADING_RESERVE = 20
SUBHEADING_ADVANCE = 15
PARAGRAPH_RESERVE = 20
LINE_RESERVE = 8
LINE_ADVANCE = 6
PARAGRAPH_GAP = 10
TABLE_GAP = 20

FONT_FAMILY = "Helvetica"

PALETTE = {
    "accent": (46, 125, 50),
    "ink": (0, 0, 0),
    "white": (255, 255, 255),
    "badge": (240, 240, 240),
    "muted": (128, 128, 128),
    "stripe": (245, 246, 248),
    "grid": (200, 200, 200),
}

ARTIFACT_EXTENSION = ".pdf"
ARTIFACT_MIME = "application/pdf"

# Seconds before a staged download is cleaned up.
DOWNLOAD_CLEANUP_DELAY = 1.0


def report_dir() -> Path:
    """Report store location, overridable with ESG_REPORT_DIR."""
    env_dir = os.getenv(ENV_REPORT_DIR, "").strip()
    return Path(env_dir) if env_dir else DEFAULT_REPORT_DIR


def log_level() -> str:
    return os.getenv(ENV_LOG_LEVEL, "INFO").strip().upper() or "INFO"
