"""Physio.Case — Винятки"""


class PhysioCaseError(Exception):
    """Базовий виняток Physio.Case"""


class KnowledgeBaseError(PhysioCaseError, ValueError):
    """Некоректний каталог (таблиці ймовірностей або питання)"""


class ConfigError(PhysioCaseError, ValueError):
    """Некоректна конфігурація"""


class AssessmentStateError(PhysioCaseError, RuntimeError):
    """Неправильне використання сесії (відповідь без питання, повторна відповідь...)"""
