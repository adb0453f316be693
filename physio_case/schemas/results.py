"""
Physio.Case — Схеми результатів

Pydantic моделі для:
- SourceIdentificationResult: висновок движка джерела болю
- RankedCondition / DiagnosticResults: ранжований диференційний діагноз
- Recommendations / ConversationSummary: підсумок для пацієнта
- QuestionResponse / ReferralResponse / SourceIdentifiedResponse /
  DiagnosisResponse: відповіді оркестратора
"""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from .knowledge import QuestionDefinition


# =============================================================================
# SOURCE IDENTIFICATION
# =============================================================================

class SourceSummary(BaseModel):
    """Одне джерело болю з апостеріорною ймовірністю"""
    id: str
    name: str
    probability: float = Field(..., ge=0.0, le=1.0)
    is_local: bool = True
    is_red_flag: bool = False
    refers_to_region: Optional[str] = None


class SourceIdentificationResult(BaseModel):
    """
    Висновок движка джерела болю.

    should_switch_region=True лише коли провідне джерело не локальне
    і його ймовірність перевищує поріг перемикання.
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "pain_site": "shoulder",
            "is_local": False,
            "top_source": {
                "id": "cervical_radiculopathy_referral",
                "name": "Cervical Spine Referral",
                "probability": 0.85,
                "is_local": False,
                "refers_to_region": "cervical_spine",
            },
            "should_switch_region": True,
            "new_region": "cervical_spine",
            "confidence": 0.71,
        }
    })

    pain_site: str = Field(..., description="Ділянка, де пацієнт відчуває біль")
    is_local: bool = True
    top_source: Optional[SourceSummary] = None
    all_sources: List[SourceSummary] = Field(default_factory=list)
    should_switch_region: bool = False
    new_region: Optional[str] = None
    confidence: float = 0.0
    supporting_findings: List[str] = Field(default_factory=list)
    clinical_implication: str = ""
    red_flag_detected: bool = False


# =============================================================================
# DIAGNOSTIC RESULTS
# =============================================================================

class RankedCondition(BaseModel):
    """Стан у ранжованому списку"""
    id: str
    name: str
    probability: float = Field(..., ge=0.0, le=1.0)
    confidence: str = Field(..., description="Very High / High / Moderate / Low / Very Low")


class DiagnosticResults(BaseModel):
    """Поточний (або фінальний) стан диференційного діагнозу"""
    top_conditions: List[RankedCondition] = Field(default_factory=list)
    confidence: float = 0.0
    needs_referral: bool = False
    questions_asked: int = 0
    body_region: Optional[str] = None
    diagnostic_summary: str = ""
    evidence_quality: str = ""
    source_identification: Optional[SourceIdentificationResult] = None
    pain_source_summary: Optional[str] = None


class Recommendations(BaseModel):
    """Рекомендації для пацієнта"""
    type: Literal["general", "specific"] = "general"
    condition: Optional[str] = None
    confidence: float = 0.0
    message: str
    next_steps: List[str] = Field(default_factory=list)
    note: Optional[str] = None


class ConversationSummary(BaseModel):
    """Підсумок інтерв'ю"""
    total_questions: int = 0
    duration_seconds: float = 0.0
    key_findings: List[str] = Field(default_factory=list)
    final_confidence: float = 0.0


class Progress(BaseModel):
    """Прогрес інтерв'ю для UI"""
    questions_asked: int = 0
    confidence: float = 0.0
    leading_hypothesis_name: str = "Analyzing..."
    phase: str
    source_identification: Optional[str] = None


# =============================================================================
# RESPONSES
# =============================================================================

class QuestionResponse(BaseModel):
    """Наступне питання"""
    type: Literal["question"] = "question"
    question: QuestionDefinition
    progress: Progress


class SourceIdentifiedResponse(BaseModel):
    """Джерело болю визначено, оцінка переходить на іншу ділянку"""
    type: Literal["source_identified"] = "source_identified"
    message: str
    source_identification: SourceIdentificationResult
    question: QuestionDefinition
    progress: Progress


class ReferralResponse(BaseModel):
    """Червоний прапорець: термінове направлення"""
    type: Literal["referral"] = "referral"
    message: str
    urgency: Literal["immediate"] = "immediate"
    results: DiagnosticResults
    source_identification: Optional[SourceIdentificationResult] = None


class DiagnosisResponse(BaseModel):
    """Фінальний діагноз"""
    type: Literal["diagnosis"] = "diagnosis"
    results: DiagnosticResults
    source_identification: Optional[SourceIdentificationResult] = None
    conversation_summary: ConversationSummary
    recommendations: Recommendations


AssessmentResponse = Union[
    QuestionResponse,
    SourceIdentifiedResponse,
    ReferralResponse,
    DiagnosisResponse,
]
