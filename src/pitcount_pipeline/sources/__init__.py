"""
pitcount_pipeline.sources — data source adapters.

Each source wraps one external dataset:
  PITWorkbookSource — HUD PIT estimates by CoC (multi-sheet xlsx)
  CovidSource       — NYT COVID-19 cumulative counts by state (CSV)
  PopulationSource  — Census Bureau state population estimates (CSV)
"""

from pitcount_pipeline.sources.covid import CovidSource
from pitcount_pipeline.sources.pit import PITWorkbookSource
from pitcount_pipeline.sources.population import PopulationSource

__all__ = [
    "PITWorkbookSource",
    "CovidSource",
    "PopulationSource",
]
