"""Utility helpers for carryall."""
