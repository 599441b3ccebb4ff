"""MedConnect account and authentication API."""
