"""Process wiring: configuration, the Telegram application and entry points."""
