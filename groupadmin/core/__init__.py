"""Platform-wide exceptions."""
