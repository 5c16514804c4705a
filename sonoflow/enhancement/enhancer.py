"""Medical transcript enhancement.

Runs the rule-based stages over a dictated transcript, in order:

1. term standardization
2. measurement extraction (on the standardized text)
3. section classification
4. finding detection
5. suggestions, derived only from the structured outputs above
6. composition of the annotated display text

Every stage is a pure function of its input and the module-level tables, so
one enhancement pass never depends on another.
"""

import logging
from typing import Dict, List, Optional

from ..models.enhancement import (
    EnhancementRequest,
    EnhancementResult,
    FindingsResult,
    MeasurementValue,
)
from .findings import detect_findings
from .measurements import extract_measurements
from .sections import classify_section
from .terms import standardize_terms

logger = logging.getLogger(__name__)

MEASUREMENTS_SUGGESTION = '✓ Measurements extracted automatically'
SECTION_SUGGESTION = '✓ Classified as: {section}'
ABNORMAL_SUGGESTION = '⚠ Abnormal findings detected - review carefully'


def generate_suggestions(measurements: Dict[str, MeasurementValue],
                         detected_section: Optional[str],
                         findings: FindingsResult) -> List[str]:
    """Advisory notes for the clinician."""
    suggestions = []
    if measurements:
        suggestions.append(MEASUREMENTS_SUGGESTION)
    if detected_section:
        suggestions.append(SECTION_SUGGESTION.format(section=detected_section))
    if findings.abnormal:
        suggestions.append(ABNORMAL_SUGGESTION)
    return suggestions


def _format_value(value: MeasurementValue) -> str:
    # Whole floats print without ".0"; everything else keeps every digit
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compose_enhanced_text(standardized: str,
                          detected_section: Optional[str],
                          measurements: Dict[str, MeasurementValue],
                          findings: FindingsResult) -> str:
    """Section header, standardized text, measurement line, findings line."""
    enhanced = standardized

    if detected_section:
        enhanced = f"[{detected_section}]\n{enhanced}"

    if measurements:
        measurement_str = ", ".join(
            f"{name.replace('_', ' ')}: {_format_value(value)}" for name, value in measurements.items()
        )
        enhanced += f"\n\n📊 Detected measurements: {measurement_str}"

    if findings.findings:
        enhanced += f"\n\n📋 {', '.join(findings.findings)}"

    return enhanced


def enhance_transcript(request: EnhancementRequest) -> EnhancementResult:
    """Run the full enhancement pipeline over one transcript."""
    standardized = standardize_terms(request.transcript)
    measurements = extract_measurements(standardized)
    detected_section = classify_section(standardized, request.procedure_type)
    findings = detect_findings(standardized)
    suggestions = generate_suggestions(measurements, detected_section, findings)
    enhanced = compose_enhanced_text(standardized, detected_section, measurements, findings)

    logger.debug(
        f"Enhanced {request.procedure_type} transcript ({request.language}): "
        f"section={detected_section}, measurements={len(measurements)}, "
        f"findings={list(findings.findings)}"
    )

    return EnhancementResult(
        standardized=standardized,
        enhanced=enhanced,
        measurements=measurements,
        detected_section=detected_section,
        findings=findings,
        suggestions=tuple(suggestions),
    )
