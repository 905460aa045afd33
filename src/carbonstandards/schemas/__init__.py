"""
Schema definitions using Pandera for data validation.

All data contracts are defined here to ensure explicit,
validated data structures throughout the analysis.
"""

from carbonstandards.schemas.measurement import CarbonMeasurementSchema, Stage
from carbonstandards.schemas.output import GroupSummarySchema, PosteriorSummarySchema

__all__ = [
    "CarbonMeasurementSchema",
    "GroupSummarySchema",
    "PosteriorSummarySchema",
    "Stage",
]
