"""Australian public holiday feeds and a holiday-aware business-day calculator."""
