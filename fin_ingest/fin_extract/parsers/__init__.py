"""Format-specific statement readers."""
