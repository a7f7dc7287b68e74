"""Structured run logging."""
