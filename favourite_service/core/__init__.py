"""
Core modules for the Favourite Service.

This package contains the composite key handling, the error taxonomy and
the aggregation logic that hydrates favourites from remote sources.
"""
