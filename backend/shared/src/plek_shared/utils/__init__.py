"""Utility helpers for Plek services."""
