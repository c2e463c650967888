"""
Rajad Scripts Package

This package contains the data import and database management scripts
organized into logical subdirectories:

- collectors/: WFS trail import (layer allow-list, paging client, field mapping)
- database/: Database management utilities (writing, resetting, checks)
"""
