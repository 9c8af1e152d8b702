"""
Wedding package pricing.

Dynamic pricing of destination-wedding package templates in IDR, with
cached exchange rates for display in other currencies.
"""

__version__ = "1.0.0"
