"""Detect normal / abnormal / no-evidence assertions in a transcript.

The normal check ignores "normal" inside "abnormal", so "Abnormal findings"
reports abnormal only. Plain substring matching would flag both.
"""

import re

from ..models.enhancement import FindingsResult

# "normal" must not fire inside "abnormal"
NORMAL_PATTERN = re.compile(r"(?<!ab)normal|unremarkable|within normal limits|нормальн|в норме", re.IGNORECASE)
ABNORMAL_PATTERN = re.compile(r"abnormal|concerning|dilated|enlarged|thickened|патолог|расширен|увеличен", re.IGNORECASE)
NO_EVIDENCE_PATTERN = re.compile(r"no evidence of|absence of|negative for|не выявлено|отсутств", re.IGNORECASE)

NORMAL_FINDING = 'Normal findings'
ABNORMAL_FINDING = 'Abnormal findings detected'
NO_EVIDENCE_FINDING = 'No significant pathology'


def detect_findings(text: str) -> FindingsResult:
    """Run the three finding checks independently.

    A transcript may match any combination of them. The findings list is
    always ordered normal, abnormal, no-evidence.
    """
    normal = NORMAL_PATTERN.search(text) is not None
    abnormal = ABNORMAL_PATTERN.search(text) is not None
    no_evidence = NO_EVIDENCE_PATTERN.search(text) is not None

    findings = []
    if normal:
        findings.append(NORMAL_FINDING)
    if abnormal:
        findings.append(ABNORMAL_FINDING)
    if no_evidence:
        findings.append(NO_EVIDENCE_FINDING)

    return FindingsResult(
        normal=normal,
        abnormal=abnormal,
        no_evidence=no_evidence,
        findings=tuple(findings),
    )
