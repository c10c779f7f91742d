"""
Shared Kernel Module
====================

Generic infrastructure used by the visitors module and the application
bootstrap: logging, HTTP middleware and error responses.

DO NOT add visitor business logic to the shared kernel.
"""
