"""Utility modules for reskit."""
