"""
Detection aggregation: derived metrics over an analysis payload.

All functions are pure and accept any mapping. They never assume the payload
went through validation, so a malformed or partial dict degrades to the
neutral value instead of raising.
"""
from collections.abc import Mapping
from datetime import datetime, UTC
from typing import Any, Optional

from farmguard.constants.pipeline import (
    SEVERITY_HEALTH_SCORES,
    DISEASE_PENALTY,
    PEST_PENALTY,
    ANIMAL_PENALTY,
    CATEGORY_DISEASE,
    CATEGORY_INSECT,
    CATEGORY_WILDLIFE,
    CATEGORY_HEALTHY,
)
from farmguard.schemas.analysis import clamp_confidence

NUTRIENT_KEYWORDS = ('nutrient', 'deficiency', 'deficient')


def _entries(analysis: Any, key: str) -> list[Mapping]:
    if not isinstance(analysis, Mapping):
        return []
    value = analysis.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def compute_overall_health(analysis: Any) -> int:
    severity = analysis.get('severity') if isinstance(analysis, Mapping) else None
    if not isinstance(severity, str):
        severity = None
    base = SEVERITY_HEALTH_SCORES.get((severity or '').lower(), 100)

    score = (
        base
        - DISEASE_PENALTY * len(_entries(analysis, 'diseases'))
        - PEST_PENALTY * len(_entries(analysis, 'pests'))
        - ANIMAL_PENALTY * len(_entries(analysis, 'animals'))
    )
    return int(_clamp(score))


def collect_confidences(analysis: Any, keys=('diseases', 'pests', 'animals')) -> list[float]:
    confidences = []
    for key in keys:
        for entry in _entries(analysis, key):
            confidence = clamp_confidence(entry.get('confidence'))
            if confidence is not None:
                confidences.append(confidence)
    return confidences


def compute_average_confidence(analysis: Any) -> float:
    """Mean confidence across every detection; 100 when nothing was flagged."""
    confidences = collect_confidences(analysis)
    if not confidences:
        return 100.0
    return sum(confidences) / len(confidences)


def nutrient_deficiencies(analysis: Any) -> list[Mapping]:
    found = []
    for disease in _entries(analysis, 'diseases'):
        label = f"{disease.get('category', '')} {disease.get('name', '')}".lower()
        if any(keyword in label for keyword in NUTRIENT_KEYWORDS):
            found.append(disease)
    return found


def has_leaf_damage(analysis: Any) -> bool:
    severity = analysis.get('severity') if isinstance(analysis, Mapping) else None
    if severity in (None, 'none'):
        return False
    if any(disease.get('symptoms') for disease in _entries(analysis, 'diseases')):
        return True
    return any(pest.get('damageType') for pest in _entries(analysis, 'pests'))


def primary_detection(analysis: Any) -> tuple[str, str, Optional[float]]:
    """(category, name, confidence 0-100) of the most important finding."""
    for key, category in (('diseases', CATEGORY_DISEASE), ('pests', CATEGORY_INSECT),
                          ('animals', CATEGORY_WILDLIFE)):
        entries = _entries(analysis, key)
        if entries:
            first = entries[0]
            return category, str(first.get('name') or first.get('type') or category), \
                clamp_confidence(first.get('confidence'))
    return CATEGORY_HEALTHY, "Healthy", None


def enrich_analysis(analysis: Mapping, *, model: str, processing_time_ms: int, language: str) -> dict:
    """Return a copy of ``analysis`` with every derived field merged in."""
    enriched = dict(analysis)
    enriched['overallHealth'] = compute_overall_health(analysis)
    enriched['avgConfidence'] = round(compute_average_confidence(analysis), 2)
    enriched['leafDamage'] = has_leaf_damage(analysis)
    enriched['nutrientDeficiencies'] = nutrient_deficiencies(analysis)
    enriched['insects'] = list(_entries(analysis, 'pests'))
    enriched['modelMetadata'] = {
        'model': model,
        'processingTimeMs': processing_time_ms,
        'timestamp': datetime.now(UTC).isoformat(),
        'language': language,
        'degraded': bool(analysis.get('degraded', False)),
    }
    return enriched
