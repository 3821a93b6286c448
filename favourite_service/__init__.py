"""
Favourite Service.

Stores user/product favourites and enriches them with detail fetched
from the user and product services.
"""

__version__ = "0.1.0"
