"""Version information for CRM Manager."""

__app_name__ = "CRM Manager"
__company__ = "CRM Manager"
__version__ = "1.0.0"
