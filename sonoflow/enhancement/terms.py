"""Standardize clinical terminology in dictated transcripts.

Known English, Russian and Armenian phrases are rewritten to their canonical
form: English anatomy to its echocardiography abbreviation (``left ventricle``
-> ``LV``), foreign phrases to the English name with the abbreviation in
parentheses. Matching is case-insensitive and whole-word, and longer phrases
win over shorter ones they contain.
"""

import logging
import re
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)

MEDICAL_TERMS: Mapping[str, str] = MappingProxyType({
    # English -> standard abbreviation
    'left ventricle': 'LV',
    'right ventricle': 'RV',
    'left atrium': 'LA',
    'right atrium': 'RA',
    'ejection fraction': 'EF',
    'mitral valve': 'MV',
    'aortic valve': 'AV',
    'tricuspid valve': 'TV',
    'pulmonary valve': 'PV',

    # Russian
    'левый желудочек': 'left ventricle (LV)',
    'правый желудочек': 'right ventricle (RV)',
    'левое предсердие': 'left atrium (LA)',
    'правое предсердие': 'right atrium (RA)',
    'митральный клапан': 'mitral valve (MV)',
    'аортальный клапан': 'aortic valve (AV)',
    'трикуспидальный клапан': 'tricuspid valve (TV)',
    'фракция выброса': 'ejection fraction (EF)',

    # Armenian
    'ձախ փորոք': 'left ventricle (LV)',
    'աջ փորոք': 'right ventricle (RV)',
    'ձախ ականջնակ': 'left atrium (LA)',
    'աջ ականջնակ': 'right atrium (RA)',
    'միտրալ փական': 'mitral valve (MV)',
    'աորտալ փական': 'aortic valve (AV)',
})


def _normalize_phrase(phrase: str) -> str:
    return " ".join(phrase.lower().split())


def _build_term_pattern(terms: Mapping[str, str]) -> "re.Pattern[str]":
    # Alternation is tried left to right, so longest-first ordering keeps a
    # longer phrase from being shadowed by a shorter one it contains.
    ordered = sorted(terms, key=len, reverse=True)
    alternatives = "|".join(r"\s+".join(re.escape(word) for word in term.split()) for term in ordered)
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)", re.IGNORECASE)


_CANONICAL_FORMS: Mapping[str, str] = MappingProxyType(
    {_normalize_phrase(term): standard for term, standard in MEDICAL_TERMS.items()}
)
_TERM_PATTERN = _build_term_pattern(MEDICAL_TERMS)


def standardize_terms(transcript: str) -> str:
    """Replace known clinical phrases with their canonical form.

    Replacement is a single pass, so a canonical form that itself contains a
    known phrase (``left ventricle (LV)``) is never rewritten again. Text
    without known phrases is returned unchanged.
    """
    replaced = 0

    def _replace(match: "re.Match[str]") -> str:
        nonlocal replaced
        replaced += 1
        return _CANONICAL_FORMS[_normalize_phrase(match.group(0))]

    standardized = _TERM_PATTERN.sub(_replace, transcript)
    if replaced:
        logger.debug(f"Standardized {replaced} clinical term(s)")
    return standardized
