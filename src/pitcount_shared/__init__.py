"""
pitcount_shared — shared configuration, constants, geography and models.

Usage:
    from pitcount_shared.config import settings
    from pitcount_shared.constants import STATES, COUNT_COLUMNS
    from pitcount_shared.geo import coc_region_code, region_name_for_code
    from pitcount_shared.models import EnrichedRecord, RegionRate
"""

__version__ = "0.1.0"
