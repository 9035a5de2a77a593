"""Shared domain models and services for the Plek booking platform."""

__version__ = "0.1.0"
