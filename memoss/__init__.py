"""Memoss - personal reminders with recurring schedules."""
