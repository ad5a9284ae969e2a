"""Constants and the integration contract (shared by every layer)."""
