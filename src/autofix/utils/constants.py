"""Application-wide constants."""

APP_NAME = "AutoFix Pro"
APP_VERSION = "1.0.0"

# Part source recorded when the mechanic types a quote in by hand
MANUAL_ENTRY_SOURCE = "Manual Entry"

# Fallback when the recognition service cannot name the part
UNKNOWN_PART_NAME = "Unknown Part"

# Default supplier for parts added to the inventory
DEFAULT_PART_SOURCE = "Local Supplier"

