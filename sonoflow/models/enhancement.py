"""Data models for the transcript enhancement pipeline."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union, Any

MeasurementValue = Union[int, float]


@dataclass(frozen=True)
class EnhancementRequest:
    """Input to the enhancement pipeline."""
    transcript: str
    procedure_type: str = "echocardiogram"
    language: str = "en-US"


@dataclass(frozen=True)
class FindingsResult:
    """Normal / abnormal / no-evidence assertions found in a transcript."""
    normal: bool = False
    abnormal: bool = False
    no_evidence: bool = False
    findings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "normal": self.normal,
            "abnormal": self.abnormal,
            "noEvidence": self.no_evidence,
            "findings": list(self.findings),
        }


@dataclass(frozen=True)
class EnhancementResult:
    """Structured output of one enhancement pass."""
    standardized: str
    enhanced: str
    measurements: Dict[str, MeasurementValue] = field(default_factory=dict)
    detected_section: Optional[str] = None
    findings: FindingsResult = field(default_factory=FindingsResult)
    suggestions: Tuple[str, ...] = ()
