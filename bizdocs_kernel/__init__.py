"""
Bizdocs Kernel

Pure domain core of the business document ledger:
- Financial documents with conserved totals
- Payments applied against a single document
- Document templates and an immutable template catalog
- Display formatting for a closed set of currencies
"""

__version__ = "0.1.0"
