"""
Sales Dashboard

Data-shaping core of a cross-filtered e-commerce sales dashboard.
"""

__version__ = "1.0.0"
