"""Classify a transcript segment into a report section for its procedure."""

import logging
import re
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# Report sections per procedure, in priority order
PROCEDURE_SECTIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'echocardiogram': (
        'Left Ventricle',
        'Right Ventricle',
        'Left Atrium',
        'Right Atrium',
        'Mitral Valve',
        'Aortic Valve',
        'Tricuspid Valve',
        'Pulmonary Valve',
        'Pericardium',
        'Overall Assessment',
    ),
    'obstetric-ultrasound': (
        'Fetal Biometry',
        'Amniotic Fluid',
        'Placenta',
        'Fetal Anatomy',
        'Doppler Studies',
        'Fetal Position',
    ),
    'abdominal-ultrasound': (
        'Liver',
        'Gallbladder',
        'Kidneys',
        'Spleen',
        'Pancreas',
        'Aorta',
    ),
})

# Russian / Armenian substrings checked when no section name matched
MULTILINGUAL_SECTION_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('Left Ventricle', ('левый желудочек', 'ձախ փորոք')),
    ('Right Ventricle', ('правый желудочек', 'աջ փորոք')),
    ('Mitral Valve', ('митральный', 'միտրալ')),
)

# Canonical abbreviations produced by term standardization
ABBREVIATION_SECTION_ALIASES: Tuple[Tuple[str, str], ...] = (
    ('Left Ventricle', 'LV'),
    ('Right Ventricle', 'RV'),
    ('Left Atrium', 'LA'),
    ('Right Atrium', 'RA'),
    ('Mitral Valve', 'MV'),
    ('Aortic Valve', 'AV'),
    ('Tricuspid Valve', 'TV'),
    ('Pulmonary Valve', 'PV'),
)

_ABBREVIATION_PATTERNS = tuple(
    (section, re.compile(rf"(?<!\w){abbreviation}(?!\w)"))
    for section, abbreviation in ABBREVIATION_SECTION_ALIASES
)


def _fallback_section(text: str, lower_text: str, sections: Tuple[str, ...]) -> Optional[str]:
    for section, aliases in MULTILINGUAL_SECTION_ALIASES:
        if section in sections and any(alias in lower_text for alias in aliases):
            return section

    for section, pattern in _ABBREVIATION_PATTERNS:
        if section in sections and pattern.search(text):
            return section

    return None


def classify_section(text: str, procedure_type: str) -> Optional[str]:
    """Return the first section of ``procedure_type`` that ``text`` mentions.

    A section matches when its lowercase name, or that name with its first
    space removed ("leftventricle"), occurs in the lowercase text. Falls back
    to multilingual and abbreviation aliases. Only labels configured for the
    procedure are ever returned; unknown procedures yield ``None``.
    """
    sections = PROCEDURE_SECTIONS.get(procedure_type)
    if not sections:
        return None

    lower_text = text.lower()

    for section in sections:
        lower_section = section.lower()
        if lower_section in lower_text or lower_section.replace(' ', '', 1) in lower_text:
            return section

    section = _fallback_section(text, lower_text, sections)
    if section is None:
        logger.debug(f"No {procedure_type} section detected")
    return section
