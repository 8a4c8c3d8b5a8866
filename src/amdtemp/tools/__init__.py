"""Miscellaneous development helpers, such as the opt-in tick timer in :mod:`debug`."""
