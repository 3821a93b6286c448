"""
Command-line interface for the Favourite Service.
"""
