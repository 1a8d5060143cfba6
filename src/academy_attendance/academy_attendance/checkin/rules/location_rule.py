from __future__ import annotations

import logging

from ...common.geo import distance_meters
from ...core.exceptions import TooFarAwayError
from ..repository import AcademyLocationRepository
from .base import CheckInContext, CheckInRule

logger = logging.getLogger(__name__)


class LocationRule(CheckInRule):
    """Device must be within max_distance_meters of an active academy location."""

    def __init__(self, locations: AcademyLocationRepository):
        self._locations = locations

    def check(self, ctx: CheckInContext) -> None:
        if ctx.coordinates is None:
            raise TooFarAwayError("location tracking is on but the device sent no coordinates")

        locations = list(self._locations.list_active())
        if not locations:
            logger.warning("location tracking is on but no active academy location is registered")
            return

        nearest = min(
            distance_meters(ctx.coordinates.latitude, ctx.coordinates.longitude, loc.latitude, loc.longitude)
            for loc in locations
        )
        if nearest > ctx.settings.max_distance_meters:
            raise TooFarAwayError(f"{nearest:.0f}m from the academy (max {ctx.settings.max_distance_meters}m)")
