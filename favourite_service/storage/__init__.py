"""
Storage layer for favourites.

Persistence of base favourite records keyed by their composite id.
"""
