"""
Infrastructure
==============

- database: async engine, session lifecycle and TLS policy
- parameters: startup configuration sources (environment, SSM)
"""
