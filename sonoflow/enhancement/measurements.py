"""Extract numeric clinical measurements from standardized transcripts."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from ..models.enhancement import MeasurementValue

logger = logging.getLogger(__name__)

# Between a label and its value: spaces, colons, "=", the parentheses left by
# term standardization ("ejection fraction (EF) 60") and a connecting word.
_SEPARATOR = r"[\s:=()]*(?:(?:is|of|at)\s+)?"
_INTEGER = r"(\d+)"
_DECIMAL = r"(\d+(?:\.\d+)?)"


@dataclass(frozen=True)
class MeasurementPattern:
    """A labelled numeric value: label synonyms, value pattern, optional unit."""
    name: str
    labels: Tuple[str, ...]
    value: str
    unit: str
    parse: Callable[[str], MeasurementValue]

    def compile(self) -> "re.Pattern[str]":
        labels = "|".join(re.escape(label) for label in self.labels)
        # A label must not be glued to surrounding letters ("GA" in "GAP"),
        # but may run straight into its number ("EF55%").
        return re.compile(
            rf"(?<!\w)(?:{labels})(?![^\W\d_]){_SEPARATOR}{self.value}\s*(?:{self.unit})?",
            re.IGNORECASE,
        )


MEASUREMENT_PATTERNS: Tuple[MeasurementPattern, ...] = (
    MeasurementPattern(
        name="ejection_fraction",
        labels=("ejection fraction", "EF", "ФВ", "фракция выброса"),
        value=_INTEGER,
        unit=r"%|percent|процент\w*",
        parse=int,
    ),
    MeasurementPattern(
        name="biparietal_diameter",
        labels=("biparietal diameter", "BPD", "БПР"),
        value=_DECIMAL,
        unit=r"mm|cm|мм|см",
        parse=float,
    ),
    MeasurementPattern(
        name="gestational_age",
        labels=("gestational age", "GA", "срок беременности"),
        value=_INTEGER,
        unit=r"weeks?|недел\w*",
        parse=int,
    ),
    MeasurementPattern(
        name="heart_rate",
        labels=("heart rate", "HR", "ЧСС"),
        value=_INTEGER,
        unit=r"bpm|уд/мин",
        parse=int,
    ),
)

_COMPILED_PATTERNS = tuple((pattern.name, pattern.compile(), pattern.parse) for pattern in MEASUREMENT_PATTERNS)


def extract_measurements(text: str) -> Dict[str, MeasurementValue]:
    """Return the first value found for each measurement type.

    Types that are not mentioned are left out of the result.
    """
    measurements: Dict[str, MeasurementValue] = {}
    for name, pattern, parse in _COMPILED_PATTERNS:
        match = pattern.search(text)
        if match:
            measurements[name] = parse(match.group(1))

    if measurements:
        logger.debug(f"Extracted measurements: {measurements}")
    return measurements
