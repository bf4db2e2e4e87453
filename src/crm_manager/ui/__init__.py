"""Qt user interface for CRM Manager."""
