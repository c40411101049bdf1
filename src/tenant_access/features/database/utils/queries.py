"""Database query constants."""

# Round-trip query used to verify a freshly opened tenant handle
BASIC_HEALTH_CHECK = "SELECT 1"
