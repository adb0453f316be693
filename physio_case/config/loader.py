"""Physio.Case — Завантаження конфігурації"""
import yaml
from pathlib import Path
from dataclasses import asdict, fields, is_dataclass
from typing import Any, Dict, Type

from ..errors import ConfigError
from .settings import PhysioCaseConfig


def save_yaml(config: PhysioCaseConfig, path: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(asdict(config), f, default_flow_style=False, allow_unicode=True)


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: очікувався YAML-словник, отримано {type(data).__name__}")
    return data


def config_from_dict(data: Dict[str, Any], cls: Type = PhysioCaseConfig):
    """
    Зібрати типізований dataclass з вкладеного словника.

    Невідомі ключі відхиляються (помилка в назві порогу інакше
    мовчки повернула б значення за замовчуванням).
    """
    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"{cls.__name__}: невідомі параметри {unknown}")

    kwargs = {}
    for name, value in data.items():
        field_type = known[name].type
        if is_dataclass(field_type):
            if not isinstance(value, dict):
                raise ConfigError(f"{cls.__name__}.{name}: очікувався словник")
            kwargs[name] = config_from_dict(value, field_type)
        else:
            kwargs[name] = value
    return cls(**kwargs)


def save_config(config: PhysioCaseConfig, path: str) -> None:
    save_yaml(config, path)


def load_config(path: str) -> PhysioCaseConfig:
    return config_from_dict(load_yaml(path))
