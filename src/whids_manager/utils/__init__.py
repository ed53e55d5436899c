"""Shared utilities for whids-manager."""
