from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..model import CheckInSettings
from ..repository import AcademyLocationRepository
from .base import CheckInRule
from .location_rule import LocationRule
from .window_rule import TimeWindowRule


@dataclass
class CheckInRuleFactory:
    """Factory Pattern: choose which rules apply under the current settings."""

    locations: AcademyLocationRepository

    def for_settings(self, settings: CheckInSettings) -> List[CheckInRule]:
        rules: List[CheckInRule] = [TimeWindowRule()]
        if settings.location_tracking_enabled:
            rules.append(LocationRule(self.locations))
        return rules
