"""
Data Collection Scripts

This module contains the import of hiking trails from the Maa-amet
points-of-interest WFS service:
- Verified layer registry and paged WFS client
- Stable trail identities and bilingual field mapping
- Coordinate reference system and axis order heuristics
"""
