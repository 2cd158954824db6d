"""
slotengine - Compute bookable appointment slots from working hours, overrides and busy time.
"""

__version__ = "0.1.0"
