"""Rule-based clinical enhancement of dictated transcripts."""

from .terms import standardize_terms, MEDICAL_TERMS
from .measurements import extract_measurements, MEASUREMENT_PATTERNS
from .sections import classify_section, PROCEDURE_SECTIONS
from .findings import detect_findings
from .enhancer import enhance_transcript, generate_suggestions, compose_enhanced_text

__all__ = [
    "standardize_terms",
    "extract_measurements",
    "classify_section",
    "detect_findings",
    "enhance_transcript",
    "generate_suggestions",
    "compose_enhanced_text",
    "MEDICAL_TERMS",
    "MEASUREMENT_PATTERNS",
    "PROCEDURE_SECTIONS",
]
