"""
docslots - doctor availability, slot generation and appointment booking.
"""

__version__ = "0.3.0"
