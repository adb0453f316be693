"""
Physio.Case — Каталог знань

Використання:
    from physio_case.knowledge import load_knowledge_base

    kb = load_knowledge_base()            # вбудований пакет
    kb.conditions_for("ankle")
"""

from .catalog import KnowledgeBase, load_knowledge_base, DEFAULT_DATA_DIR
from ..regions import normalize_region, REGION_ALIASES

__all__ = [
    "KnowledgeBase",
    "load_knowledge_base",
    "DEFAULT_DATA_DIR",
    "normalize_region",
    "REGION_ALIASES",
]
