import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

Number = Union[int, float]


class ReportType(str, Enum):
    ENVIRONMENTAL = "environmental"
    SOCIAL = "social"
    GOVERNANCE = "governance"
    COMPREHENSIVE = "comprehensive"


class Framework(str, Enum):
    GRI = "GRI"
    SASB = "SASB"
    TCFD = "TCFD"
    EU_CSRD = "EU-CSRD"
    SEC = "SEC"
    ISSB = "ISSB"


@dataclass(frozen=True)
class Metric:
    """Canonical metric record; upstream shapes are mapped in normalize.py."""

    name: str
    value: Optional[Union[Number, str]] = None
    unit: str = ""
    target: Optional[Union[Number, str]] = None
    previous_value: Optional[Union[Number, str]] = None
    trend: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class Scores:
    overall_score: Number
    environmental_score: Number
    social_score: Number
    governance_score: Number

    def __post_init__(self) -> None:
        for label, value in self.items():
            if not 0 <= value <= 100:
                raise ValueError(f"{label} must be within [0, 100], got {value!r}")

    def items(self) -> Tuple[Tuple[str, Number], ...]:
        return (
            ("overall_score", self.overall_score),
            ("environmental_score", self.environmental_score),
            ("social_score", self.social_score),
            ("governance_score", self.governance_score),
        )


@dataclass(frozen=True)
class ComplianceRecord:
    name: str
    status: Optional[str] = None
    completion_percentage: Optional[Number] = None
    deadline: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ReportData:
    """
    Fully materialized input for one report run. Optional fields may be
    absent; section renderers substitute fallback labels instead of failing.
    """

    organization_name: str
    report_type: ReportType = ReportType.COMPREHENSIVE
    period: str = ""
    module: str = ""
    metrics: Tuple[Metric, ...] = ()
    scores: Optional[Scores] = None
    compliance: Tuple[ComplianceRecord, ...] = ()
    organization_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "report_type", ReportType(self.report_type))
        object.__setattr__(self, "metrics", tuple(self.metrics))
        object.__setattr__(self, "compliance", tuple(self.compliance))

    def cache_key(self) -> str:
        """Stable identifier for the data payload."""
        return hashlib.sha256(repr(self).encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class ReportConfig:
    """
    Layout options for a report. `framework` accepts any string; identifiers
    outside Framework resolve to generic wording. `include_charts` and
    `custom_sections` are carried but not rendered.
    """

    title: str
    framework: str = Framework.GRI.value
    subtitle: Optional[str] = None
    include_charts: bool = True
    include_metrics: bool = True
    include_compliance: bool = True
    custom_sections: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Store enum members as their plain identifier so text renders as "GRI".
        if isinstance(self.framework, Framework):
            object.__setattr__(self, "framework", self.framework.value)
        object.__setattr__(self, "custom_sections", tuple(self.custom_sections))

    def cache_key(self) -> str:
        stem = (
            f"{self.title}|{self.subtitle}|{self.framework}|{self.include_charts}|"
            f"{self.include_metrics}|{self.include_compliance}|{self.custom_sections}"
        )
        return hashlib.sha256(stem.encode("utf-8")).hexdigest()[:16]


def report_id(data: ReportData, config: ReportConfig) -> str:
    """Identifier shared by the report store and queue for one (data, config) pair."""
    stem = f"{data.cache_key()}|{config.cache_key()}"
    return hashlib.sha256(stem.encode("utf-8")).hexdigest()[:12]
