"""Toolkit - helpers shared by event channels."""
