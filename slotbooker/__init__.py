"""
slotbooker - time-slot scheduling and reservation validation.
"""

__version__ = "0.1.0"
