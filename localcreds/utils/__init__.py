"""
Shared utilities for localcreds.
"""
