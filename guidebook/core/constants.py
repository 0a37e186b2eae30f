# guidebook/core/constants.py
"""Application-wide constants."""

BRAND_NAME = "GuideBook"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Browse guides, check their open slots and book a session."
API_VERSION = "1.0.0"

# Maximum length of free-text booking notes
BOOKING_NOTES_MAX_LENGTH = 1000

# Name of the partial unique index guarding active bookings per guide slot
ACTIVE_SLOT_INDEX_NAME = "uq_bookings_active_guide_slot"

# Largest value an Integer id column holds (PostgreSQL int4)
MAX_DB_INT = 2_147_483_647
