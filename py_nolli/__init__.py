"""
py_nolli - figure-ground grids and extruded solids from building footprints.
"""

__version__ = "0.1.0"
