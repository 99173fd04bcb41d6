"""
Utilities: JSON graph loader and logger.
"""
