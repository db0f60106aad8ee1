"""
kitchenslots - venue slot availability for a cooking school.
"""

__version__ = "0.1.0"
