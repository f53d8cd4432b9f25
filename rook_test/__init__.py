"""
Rook Test - End-to-end test suites for Rook storage clusters.

This package provides:
- Block image creation suites against the Rook management API
- Smoke suites for block, file and object storage lifecycles
"""

__version__ = "0.1.0"
