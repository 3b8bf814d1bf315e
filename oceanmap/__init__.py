"""
oceanmap: Survey Station Features for Oceanographic Maps

Turns survey-station tables into point features ready to be layered over
satellite imagery, bathymetry, coastlines and fishery-management zones:
- Degrees-minutes coordinate strings -> decimal degrees
- Decimal pairs -> points tagged with a geodetic datum
- Points + station attributes -> an ordered, immutable feature collection
"""

__version__ = "0.1.0"
