"""
Physio.Case — Нормалізація назв ділянок тіла

Каталоги, UI та body map використовують різні написання однієї ділянки
("lower-back", "Lower Back", "lumbar"). Всі вони зводяться до одного
ключа таблиць.
"""

from typing import Iterable, List, Optional


ALL_REGIONS = "all"

REGION_ALIASES = {
    # Поперек
    "lower_back": "lumbar_spine",
    "lowerback": "lumbar_spine",
    "lumbar": "lumbar_spine",
    "lbp": "lumbar_spine",

    # Грудний відділ
    "upper_back": "thoracic_spine",
    "upperback": "thoracic_spine",
    "mid_back": "thoracic_spine",
    "midback": "thoracic_spine",
    "thoracic": "thoracic_spine",

    # Шия
    "neck": "cervical_spine",
    "cervical": "cervical_spine",

    # Гомілка
    "calf": "lower_leg",
    "leg": "lower_leg",
    "lowerleg": "lower_leg",

    # Плече (верхня частина руки)
    "upper_arm": "arm",
    "upperarm": "arm",
    "bicep": "arm",
    "tricep": "arm",
}


def normalize_region(region: Optional[str]) -> Optional[str]:
    """
    Привести назву ділянки до ключа таблиць.

    Приклад:
        normalize_region("Lower-Back")  # "lumbar_spine"
        normalize_region("neck")        # "cervical_spine"
        normalize_region("ankle")       # "ankle"
    """
    if region is None:
        return None
    key = str(region).strip().lower().replace(" ", "_").replace("-", "_")
    if not key:
        return None
    return REGION_ALIASES.get(key, key)


def normalize_regions(regions: Iterable[str]) -> List[str]:
    """Нормалізувати список ділянок, зберігаючи порядок і прибираючи дублікати"""
    result: List[str] = []
    for region in regions:
        key = normalize_region(region)
        if key and key not in result:
            result.append(key)
    return result
