"""GuideBook: guide slot booking API."""
