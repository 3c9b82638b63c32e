from dataclasses import dataclass
from typing import Optional

import streamlit as st

from .context import Framework, ReportConfig, ReportType
from .report_presets import REPORT_PRESETS, build_report_config


@dataclass(frozen=True)
class ReportRequest:
    """Values collected by the report builder form."""

    organization_name: str
    report_type: ReportType
    module: str
    period: str
    config: ReportConfig
    background: bool = False


def render_report_form(default_org: str = "", default_period: Optional[str] = None) -> Optional[ReportRequest]:
    """
    Shared report builder form. Returns a ReportRequest when submitted,
    otherwise None. Framework defaults follow the preset for the report type.
    """
    report_types = list(ReportType)
    frameworks = [f.value for f in Framework]

    with st.form("report_builder"):
        organization_name = st.text_input("Organization", value=default_org)
        report_type = st.selectbox(
            "Report type",
            report_types,
            format_func=lambda rt: REPORT_PRESETS[rt].label,
        )
        module = st.text_input("Module", value="Comprehensive ESG")
        period = st.text_input("Reporting period", value=default_period or "")
        framework = st.selectbox(
            "Framework",
            ["(preset default)"] + frameworks,
            index=0,
        )
        include_metrics = st.toggle("Include metrics", value=True)
        include_compliance = st.toggle("Include compliance", value=True)
        background = st.toggle("Generate in background", value=False)
        submitted = st.form_submit_button("Generate report")

    if not submitted:
        return None

    module = module.strip()
    period = period.strip()
    config = build_report_config(
        report_type,
        module,
        period=period or None,
        framework=None if framework == "(preset default)" else framework,
        include_metrics=include_metrics,
        include_compliance=include_compliance,
    )
    return ReportRequest(
        organization_name=organization_name.strip(),
        report_type=report_type,
        module=module,
        period=period,
        config=config,
        background=background,
    )
