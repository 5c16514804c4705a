"""Recognition model selection by language."""

from typing import Tuple

# Primary language subtag -> recognition model. Google's medical dictation
# model is only offered for English.
RECOGNITION_MODEL_POLICY: Tuple[Tuple[str, str], ...] = (
    ("en", "medical_dictation"),
)

DEFAULT_RECOGNITION_MODEL = "command_and_search"


def select_recognition_model(language_code: str) -> str:
    """Pick the recognition model for a BCP-47 language tag."""
    primary = language_code.replace("_", "-").split("-", 1)[0].lower()
    for prefix, model in RECOGNITION_MODEL_POLICY:
        if primary == prefix:
            return model
    return DEFAULT_RECOGNITION_MODEL
