from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

from .context import Framework, ReportConfig, ReportType


@dataclass(frozen=True)
class ReportPreset:
    label: str
    framework: Framework
    include_charts: bool = True
    include_metrics: bool = True
    include_compliance: bool = True


REPORT_PRESETS: Dict[ReportType, ReportPreset] = {
    ReportType.ENVIRONMENTAL: ReportPreset(label="Environmental", framework=Framework.GRI),
    ReportType.SOCIAL: ReportPreset(label="Social", framework=Framework.SASB),
    ReportType.GOVERNANCE: ReportPreset(label="Governance", framework=Framework.TCFD),
    ReportType.COMPREHENSIVE: ReportPreset(label="Comprehensive", framework=Framework.GRI),
}


def build_report_config(
    report_type: ReportType,
    module: str,
    period: Optional[str] = None,
    framework: Optional[str] = None,
    include_charts: Optional[bool] = None,
    include_metrics: Optional[bool] = None,
    include_compliance: Optional[bool] = None,
    today: Optional[date] = None,
) -> ReportConfig:
    """
    Fill a ReportConfig from the preset for `report_type`; explicit arguments
    win over preset defaults.
    """
    preset = REPORT_PRESETS[ReportType(report_type)]
    year = (today or date.today()).year
    return ReportConfig(
        title=f"{module} {preset.label} Report".strip(),
        subtitle=period or f"Annual {year}",
        framework=framework or preset.framework.value,
        include_charts=preset.include_charts if include_charts is None else include_charts,
        include_metrics=preset.include_metrics if include_metrics is None else include_metrics,
        include_compliance=preset.include_compliance if include_compliance is None else include_compliance,
    )
