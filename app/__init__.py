"""Notification dispatch service for the book lending platform."""
