"""
Creator fee claim, swap and holder reward distribution client for pump.fun tokens.
"""

__version__ = "0.3.0"
