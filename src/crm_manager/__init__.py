"""CRM Manager desktop application."""

from crm_manager.version import __app_name__, __version__

__all__ = ["__app_name__", "__version__"]
