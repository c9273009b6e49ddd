"""Shared utilities for Planscope."""
