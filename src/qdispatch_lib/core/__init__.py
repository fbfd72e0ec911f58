# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for qdispatch.

This module collects the foundational classes, utilities, and helpers used
across the qdispatch codebase: configuration, error types, structured
logging, retrying, help formatting, and small file and string helpers.
"""
