"""
Geographic reconciliation

Country boundaries and sales data name some countries differently.
A static alias table renames boundary features so that joins on the
country name line up. Names present on only one side simply never match.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

from salesdash.config import get_settings
from salesdash.models import CountryQuantity

logger = structlog.get_logger(__name__)


def _features(boundaries: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return list(boundaries.get("features") or [])


def feature_name(feature: Mapping[str, Any]) -> Optional[str]:
    properties = feature.get("properties") or {}
    return properties.get("name")


def reconcile_geography(
    boundaries: Mapping[str, Any],
    alias_table: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Rename boundary features with the alias table.

    Args:
        boundaries: GeoJSON FeatureCollection with properties.name per feature
        alias_table: boundary name -> sales country name; configured aliases by default

    Returns:
        A renamed copy; the input is not modified
    """
    if alias_table is None:
        alias_table = get_settings().geography.country_aliases

    reconciled = copy.deepcopy(dict(boundaries))
    renamed = 0
    for feature in _features(reconciled):
        name = feature_name(feature)
        if name in alias_table:
            feature["properties"]["name"] = alias_table[name]
            renamed += 1

    logger.debug("Reconciled boundary names", renamed=renamed, aliases=len(alias_table))
    return reconciled


def boundary_names(boundaries: Mapping[str, Any]) -> List[str]:
    """Feature names in boundary order, skipping unnamed features"""
    names = []
    for feature in _features(boundaries):
        name = feature_name(feature)
        if name is not None:
            names.append(name)
    return names


def join_quantities(
    boundaries: Mapping[str, Any],
    quantities: Iterable[CountryQuantity],
) -> Dict[str, int]:
    """Units sold per boundary feature, zero for countries without sales"""
    by_country = {q.country: q.quantity for q in quantities}
    return {name: by_country.get(name, 0) for name in boundary_names(boundaries)}
