"""Reusable widgets."""

from crm_manager.ui.widgets.cards import KpiCard

__all__ = ["KpiCard"]
