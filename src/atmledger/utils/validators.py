"""Input format checks for account identity fields."""

import re

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}")
PIN_PATTERN = re.compile(r"[0-9]{4,6}")
NAME_PATTERN = re.compile(r"[A-Za-z\s]{2,50}")


def normalize_email(email: str) -> str:
    """Trim and lower-case an email for storage and lookup."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(email) and len(email) <= 254 and EMAIL_PATTERN.fullmatch(email.strip()) is not None


def is_valid_pin(pin: str) -> bool:
    """PINs are 4 to 6 digits, nothing else."""
    return bool(pin) and PIN_PATTERN.fullmatch(pin) is not None


def is_valid_name(name: str) -> bool:
    return bool(name) and NAME_PATTERN.fullmatch(name.strip()) is not None


def registration_errors(name: str, email: str, pin: str) -> list[str]:
    """Collect every format problem with a registration request."""
    errors = []
    if not is_valid_name(name):
        errors.append("Name must be 2-50 characters and contain only letters and spaces.")
    if not is_valid_email(email):
        errors.append("Please enter a valid email address.")
    if not is_valid_pin(pin):
        errors.append("PIN must be 4-6 digits only.")
    return errors
