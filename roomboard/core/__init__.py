"""Core infrastructure for roomboard: configuration, logging, timezones, HTTP."""
