"""Calculation history persistence."""
