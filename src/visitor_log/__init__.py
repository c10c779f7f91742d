"""
Visitor Log
===========

Backend for the visitor log demo: a small REST API that records visitor
names in PostgreSQL and checks outbound connectivity.
"""

__version__ = "1.0.0"
