"""
Physio.Case — Pydantic схеми

Використання:
    from physio_case.schemas import QuestionDefinition, DiagnosisResponse

    response = orchestrator.answer("DIFF_ANKLE_001", True)
    print(response.model_dump_json(indent=2))
"""

from .knowledge import (
    SymptomCategory,
    QuestionPhase,
    QuestionType,
    SymptomLikelihood,
    ConditionEntry,
    SourceEntry,
    QuestionOption,
    ConditionalOn,
    QuestionDefinition,
    YES_TOKENS,
    NO_TOKENS,
)

from .results import (
    SourceSummary,
    SourceIdentificationResult,
    RankedCondition,
    DiagnosticResults,
    Recommendations,
    ConversationSummary,
    Progress,
    QuestionResponse,
    SourceIdentifiedResponse,
    ReferralResponse,
    DiagnosisResponse,
    AssessmentResponse,
)


__all__ = [
    # Knowledge
    "SymptomCategory",
    "QuestionPhase",
    "QuestionType",
    "SymptomLikelihood",
    "ConditionEntry",
    "SourceEntry",
    "QuestionOption",
    "ConditionalOn",
    "QuestionDefinition",
    "YES_TOKENS",
    "NO_TOKENS",

    # Results
    "SourceSummary",
    "SourceIdentificationResult",
    "RankedCondition",
    "DiagnosticResults",
    "Recommendations",
    "ConversationSummary",
    "Progress",

    # Responses
    "QuestionResponse",
    "SourceIdentifiedResponse",
    "ReferralResponse",
    "DiagnosisResponse",
    "AssessmentResponse",
]
