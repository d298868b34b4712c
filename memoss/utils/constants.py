"""Constants and default values."""

# Weekday numbers, 1 = Sunday .. 7 = Saturday
WEEKDAY_NUMBERS = {
    "sunday": 1,
    "monday": 2,
    "tuesday": 3,
    "wednesday": 4,
    "thursday": 5,
    "friday": 6,
    "saturday": 7,
}

WEEKDAY_NAMES = {number: name.capitalize() for name, number in WEEKDAY_NUMBERS.items()}

# Notifications
NOTIFICATION_TITLE = "Memoss"
DEFAULT_SNOOZE_MINUTES = 15

# Default timezone
DEFAULT_TIMEZONE = "UTC"
