"""Strings function namespace."""
