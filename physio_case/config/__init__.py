"""Physio.Case — Модуль конфігурації"""
from .settings import (
    PhysioCaseConfig,
    get_default_config,
    InferenceConfig,
    QuestionRankingConfig,
    ConditionStoppingConfig,
    SourceStoppingConfig,
    OrchestratorConfig,
    ReportingConfig,
)
from .loader import save_config, load_config, save_yaml, load_yaml, config_from_dict

__all__ = [
    "PhysioCaseConfig",
    "get_default_config",
    "InferenceConfig",
    "QuestionRankingConfig",
    "ConditionStoppingConfig",
    "SourceStoppingConfig",
    "OrchestratorConfig",
    "ReportingConfig",
    "save_config",
    "load_config",
    "save_yaml",
    "load_yaml",
    "config_from_dict",
]
