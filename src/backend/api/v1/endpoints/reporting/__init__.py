"""Reporting endpoints."""
