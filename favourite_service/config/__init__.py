"""
Configuration for the Favourite Service.
"""
