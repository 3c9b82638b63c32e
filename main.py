import logging
from datetime import date

import pandas as pd
import streamlit as st

from esg_reports.config import log_level
from esg_reports.context import ReportData, report_id
from esg_reports.data_loader import load_metrics, resolve_data_path
from esg_reports.delivery import StreamlitDelivery, build_report_filename, download_artifact
from esg_reports.engine import ReportEngine
from esg_reports.errors import RenderFailure
from esg_reports.layout import render_report_form
from esg_reports.normalize import normalize_report_data
from esg_reports.report_queue import ReportQueue
from esg_reports.report_store import save_report_pdf

logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("esg_reports.app")

st.set_page_config(page_title="ESG Report Builder", layout="wide")

# Mock dashboard payload used when no metrics table is supplied.
SAMPLE_PAYLOAD = {
    "organizationName": "Acme Corp",
    "period": "FY2024",
    "scores": {"overallScore": 74, "environmentalScore": 78, "socialScore": 71, "governanceScore": 73},
    "metrics": [
        {"name": "GHG Emissions", "value": 198070, "unit": "tCO2e", "target": 150000},
        {"metricName": "Renewable Energy Share", "currentValue": 45, "unit": "%", "targetValue": 60, "previousValue": 38},
        {"name": "Water Withdrawal", "value": 1250, "unit": "ML", "previousValue": 1400},
        {"name": "Board Independence", "value": 67, "unit": "%", "target": 75},
    ],
    "compliance": [
        {"frameworkName": "GRI Standards", "status": "Compliant", "completionPercentage": 100, "deadline": "2025-03-31"},
        {"name": "TCFD", "status": "In Progress", "completionPercentage": 72, "nextDeadline": "2025-06-30"},
        {"name": "EU-CSRD", "description": "Double materiality assessment underway"},
    ],
}


@st.cache_resource(show_spinner=False)
def get_queue() -> ReportQueue:
    return ReportQueue(max_workers=2)


def _metrics_source():
    upload = st.sidebar.file_uploader("Metrics table (CSV, Parquet, Excel)", type=["csv", "parquet", "xlsx", "xls"])
    if upload is not None:
        return upload, upload.name
    path = resolve_data_path()
    if path:
        return path, path
    return None, ""


def _build_data(request) -> ReportData:
    payload = dict(SAMPLE_PAYLOAD)
    payload.update(
        {
            "organizationName": request.organization_name or SAMPLE_PAYLOAD["organizationName"],
            "reportType": request.report_type.value,
            "module": request.module,
            "period": request.period or SAMPLE_PAYLOAD["period"],
        }
    )
    data = normalize_report_data(payload)

    source, name = _metrics_source()
    if source is not None:
        try:
            metrics = load_metrics(source, name)
        except (ValueError, OSError) as exc:
            logger.warning("Ignoring metrics table %s: %s", name, exc)
            st.sidebar.warning(f"Metrics table ignored: {exc}")
        else:
            data = ReportData(
                organization_name=data.organization_name,
                report_type=data.report_type,
                period=data.period,
                module=data.module,
                metrics=tuple(metrics),
                scores=data.scores,
                compliance=data.compliance,
            )
    return data


def _preview(data: ReportData) -> None:
    if not data.metrics:
        st.info("No metrics supplied; the metrics table will be omitted.")
        return
    frame = pd.DataFrame(
        [
            {"Metric": m.name, "Value": m.value, "Unit": m.unit, "Target": m.target, "Previous": m.previous_value}
            for m in data.metrics
        ]
    )
    st.dataframe(frame, use_container_width=True, hide_index=True)


st.title("ESG Report Builder")
st.caption("Compose a paginated sustainability report from dashboard metrics.")

request = render_report_form(default_org=SAMPLE_PAYLOAD["organizationName"], default_period="FY2024")

if request is not None:
    data = _build_data(request)
    _preview(data)

    if request.background:
        job_id = get_queue().submit(data, request.config)
        st.session_state.setdefault("report_jobs", []).append(job_id)
        st.success(f"Report queued as job {job_id}.")
    else:
        try:
            result = ReportEngine().render_artifact(data, request.config)
        except RenderFailure as exc:
            st.error(f"Report generation failed: {exc}")
        else:
            filename = build_report_filename(data, date.today())
            save_report_pdf(report_id(data, request.config), result.content, data, request.config, page_count=result.page_count)
            download_artifact(result.content, filename, StreamlitDelivery(key=f"download-{filename}"))
            st.success(f"Report generated: {result.page_count} pages.")

jobs = st.session_state.get("report_jobs", [])
if jobs:
    st.subheader("Background jobs")
    queue = get_queue()
    rows = []
    for job_id in jobs:
        job = queue.get(job_id)
        if job is None:
            continue
        rows.append({"Job": job.id, "Organization": job.data.organization_name, "Status": job.status,
                     "File": job.result_path or "", "Error": job.error or ""})
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
