"""Protocol adapters for the rules service."""
