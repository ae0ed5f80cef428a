"""Shared components for Incidence Bot."""
