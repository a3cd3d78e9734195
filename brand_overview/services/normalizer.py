"""
Fills gaps in parsed model output so downstream code never branches on absence.
"""

import logging
from typing import Any, Dict

from ..models.analysis import (
    ANALYSIS_FIELDS,
    GEOLOCATION_FIELDS,
    MONETARY_FIELDS,
    NOT_AVAILABLE,
    NOT_PUBLICLY_AVAILABLE,
    NOT_SPECIFIED,
    SEQUENCE_FIELDS,
)

logger = logging.getLogger(__name__)


def default_for(field_name: str) -> Any:
    """Type-directed default for one analysis field."""
    if field_name in MONETARY_FIELDS:
        return NOT_PUBLICLY_AVAILABLE
    if field_name in SEQUENCE_FIELDS:
        return []
    return NOT_AVAILABLE


class AnalysisNormalizer:
    """Completes analysis and geolocation records with typed defaults."""

    def normalize(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of `partial` with every analysis field present.

        Missing or null fields get their default; fields that are already
        set, and any extra keys, pass through untouched. Normalizing a
        complete record returns an equal record.
        """
        record = dict(partial)
        missing = [name for name in ANALYSIS_FIELDS if record.get(name) is None]
        for name in missing:
            record[name] = default_for(name)
        if missing:
            logger.debug(f"Filled {len(missing)} missing analysis fields: {', '.join(missing)}")
        return record

    def normalize_geolocation(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(partial)
        for name in GEOLOCATION_FIELDS:
            if record.get(name) is None:
                record[name] = NOT_SPECIFIED if name == "headquarters" else []
        return record
