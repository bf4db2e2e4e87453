"""Business services for CRM Manager."""
