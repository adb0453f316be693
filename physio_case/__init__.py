"""
Physio.Case — Адаптивне інтерв'ю для диференційної діагностики
опорно-рухового апарату

Архітектура: Naive Bayes + Expected Information Gain + фазовий автомат

Модулі:
- config: Конфігурація системи (пороги зупинки, ранжування питань)
- schemas: Pydantic моделі каталогів та результатів
- knowledge: Завантаження таблиць ймовірностей та каталогів питань
- question_engine: Байєсівське оновлення, EIG, обробка відповідей
- diagnosis_cycle: Движок станів, движок джерела болю, оркестратор
"""

__version__ = "0.1.0"

from .config import PhysioCaseConfig, get_default_config
from .errors import (
    PhysioCaseError,
    KnowledgeBaseError,
    ConfigError,
    AssessmentStateError,
)
