"""Clinic Calendar test suite."""
