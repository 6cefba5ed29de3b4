"""Utility functions for pointledger."""

from pointledger.utils.amount_parser import parse_points, require_points

__all__ = ["parse_points", "require_points"]
