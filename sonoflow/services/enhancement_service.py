"""Batch enhancement boundary: validates requests and shapes pipeline results."""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..config import SonoFlowConfig
from ..enhancement import enhance_transcript
from ..errors import ValidationError
from ..models.enhancement import EnhancementRequest, EnhancementResult

logger = logging.getLogger(__name__)

NO_TRANSCRIPT_MESSAGE = "No transcript provided"


class ExtractFieldsBody(BaseModel):
    """Body of an ``extract-fields`` request."""
    model_config = ConfigDict(extra="ignore")

    transcript: Optional[str] = None
    procedure_type: Optional[str] = None
    language: Optional[str] = None


class EnhancementService:
    """Turns raw ``extract-fields`` requests into enhancement responses."""

    def __init__(self, default_procedure: str = "echocardiogram", default_language: str = "en-US"):
        """Initialize enhancement service.

        Args:
            default_procedure: Procedure type used when a request names none
            default_language: Language tag used when a request names none
        """
        self.default_procedure = default_procedure
        self.default_language = default_language

    @classmethod
    def from_config(cls, config: SonoFlowConfig) -> "EnhancementService":
        return cls(
            default_procedure=config.get('enhancement.default_procedure', 'echocardiogram'),
            default_language=config.get('enhancement.default_language', 'en-US'),
        )

    def build_request(self, body: Any) -> EnhancementRequest:
        """Validate a request body and apply defaults.

        Raises:
            ValidationError: If the transcript is missing or a field has the wrong type
        """
        if not isinstance(body, dict):
            raise ValidationError(NO_TRANSCRIPT_MESSAGE)

        try:
            parsed = ExtractFieldsBody.model_validate(body)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(f"Invalid request: {problems}") from e

        if not parsed.transcript:
            raise ValidationError(NO_TRANSCRIPT_MESSAGE)

        return EnhancementRequest(
            transcript=parsed.transcript,
            procedure_type=parsed.procedure_type or self.default_procedure,
            language=parsed.language or self.default_language,
        )

    def enhance(self, body: Any) -> Dict[str, Any]:
        """Enhance one transcript and return the response document."""
        request = self.build_request(body)
        result = enhance_transcript(request)
        logger.info(f"Enhanced {len(request.transcript)}-char {request.procedure_type} transcript: "
                    f"section={result.detected_section}, measurements={sorted(result.measurements)}")
        return self.to_response(request, result)

    @staticmethod
    def to_response(request: EnhancementRequest, result: EnhancementResult) -> Dict[str, Any]:
        return {
            "enhanced_transcript": result.enhanced,
            "standardized": result.standardized,
            "measurements": dict(result.measurements),
            "detected_section": result.detected_section,
            "findings": result.findings.to_dict(),
            "suggestions": list(result.suggestions),
            "raw_transcript": request.transcript,
        }
