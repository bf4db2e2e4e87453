"""Shared helpers for CRM Manager."""
