"""Dormitory facility-complaint tracker."""

__version__ = "1.0.0"
