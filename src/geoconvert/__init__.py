"""
geoconvert - GeoJSON/KML/KMZ conversion and area validation service.

This package converts vector geometries between GeoJSON and KML, packages
KML documents into KMZ archives and checks that a set of position
geometries covers a main geometry within a tolerance.
"""

__version__ = "0.1.0"
