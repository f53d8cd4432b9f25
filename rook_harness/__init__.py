"""
Rook Harness - A Python package for end-to-end testing of Rook storage clusters.

This package provides utilities for:
- Selecting a target platform and wiring the matching clients
- Driving the Rook management API (block images, pools, filesystems, object store)
- Executing commands inside cluster pods and applying Kubernetes manifests
- Installing and removing Rook on a Kubernetes cluster
- Tracking and cleaning up resources created by test suites
"""

__version__ = "0.1.0"
