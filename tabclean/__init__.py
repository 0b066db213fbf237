"""
Tabular Cleaning Engine
=======================
Parses delimited text, applies declarative cleaning rules, profiles
data quality before and after cleaning, and writes the result back
to delimited text.
"""

__version__ = "1.0.0"
