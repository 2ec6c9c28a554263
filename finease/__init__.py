"""
FinEase

Personal finance tracking backend: transaction records and reports.
"""

__version__ = "1.0.0"
