"""
Visitors Module
===============

Records visitor names submitted from the front-end form and lists them
newest first. Also hosts the outbound connectivity check.
"""
