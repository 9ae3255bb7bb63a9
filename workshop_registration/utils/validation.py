"""Data validation utilities."""
import re
from datetime import datetime
from typing import Dict, Optional, Tuple

VALID_GRADES = ["9_or_below", "10", "11", "12_or_above"]

GRADE_LABELS = {
    "9_or_below": "9th grade or below",
    "10": "10th grade",
    "11": "11th grade",
    "12_or_above": "12th grade or above",
}

NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_MOTIVATION_LENGTH = 10


def validate_date_format(date_str: str) -> bool:
    """
    Validate date string in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid

    Raises:
        ValueError: If date format is invalid
    """
    if not isinstance(date_str, str):
        raise ValueError("Date must be a string")

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Date must be in YYYY-MM-DD format: {date_str}")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date value: {date_str} - {str(e)}")

    return True


def validate_time_of_day_format(time_str: str) -> bool:
    """
    Validate time string in HH:MM format.

    Raises:
        ValueError: If time format is invalid
    """
    if not isinstance(time_str, str):
        raise ValueError("Time must be a string")

    if not re.match(r"^\d{2}:\d{2}$", time_str):
        raise ValueError(f"Time must be in HH:MM format: {time_str}")

    try:
        datetime.strptime(time_str, "%H:%M")
    except ValueError:
        raise ValueError(f"Invalid time value: {time_str}")

    return True


def validate_name(name: str) -> bool:
    """
    Validate a person's name.

    Args:
        name: Name to validate

    Returns:
        True when the trimmed name has at least 2 characters made of
        letters, spaces, hyphens and apostrophes
    """
    if not isinstance(name, str):
        return False
    trimmed = name.strip()
    if len(trimmed) < 2:
        return False
    return bool(NAME_PATTERN.match(trimmed))


def validate_email(email: str) -> bool:
    """Validate email shape (local@domain.tld)."""
    if not isinstance(email, str):
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def validate_phone(phone: str) -> bool:
    """
    Validate a US phone number in any punctuation.

    Returns:
        True when the number has exactly 10 or 11 digits
        (with or without country code)
    """
    if not isinstance(phone, str):
        return False
    digits = re.sub(r"\D", "", phone)
    return len(digits) in (10, 11)


def validate_grade(grade: str) -> bool:
    """Validate grade selection against the fixed set."""
    return grade in VALID_GRADES


def normalize_email(email: str) -> str:
    """
    Normalize email for storage and duplicate comparison.

    Example: " Student@Example.COM " → "student@example.com"
    """
    return email.strip().lower()


def format_name(name: str) -> str:
    """
    Capitalize the first letter of each word.

    Example: "mARY jane" → "Mary Jane"
    """
    words = name.strip().lower().split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words).strip()


def validate_motivation(text: Optional[str]) -> Tuple[bool, str]:
    """
    Validate the optional motivation field.

    Returns:
        Tuple of (is_valid: bool, error_message: str)
        - (True, "") if blank or long enough
        - (False, message) if shorter than 10 characters
    """
    if not text or not text.strip():
        return True, ""
    if len(text.strip()) < MIN_MOTIVATION_LENGTH:
        return False, "Please provide more details (at least 10 characters) or leave blank"
    return True, ""


def validate_registration_form(form) -> Dict[str, str]:
    """
    Validate every field of a registration form.

    All failing fields are reported together rather than stopping at
    the first error.

    Args:
        form: RegistrationForm with raw user input

    Returns:
        Mapping of field name to error message; empty when valid
    """
    errors: Dict[str, str] = {}

    if not form.student_name or not form.student_name.strip():
        errors["student_name"] = "Student name is required"
    elif not validate_name(form.student_name):
        errors["student_name"] = "Please enter a valid name (at least 2 characters, letters only)"

    if not form.student_email or not form.student_email.strip():
        errors["student_email"] = "Student email is required"
    elif not validate_email(form.student_email):
        errors["student_email"] = "Please enter a valid email address (e.g., student@example.com)"

    if not form.student_grade:
        errors["student_grade"] = "Please select a grade level"
    elif not validate_grade(form.student_grade):
        errors["student_grade"] = "Please select a valid grade level"

    if not form.parent_name or not form.parent_name.strip():
        errors["parent_name"] = "Parent/guardian name is required"
    elif not validate_name(form.parent_name):
        errors["parent_name"] = "Please enter a valid name (at least 2 characters, letters only)"

    if not form.parent_email or not form.parent_email.strip():
        errors["parent_email"] = "Parent/guardian email is required"
    elif not validate_email(form.parent_email):
        errors["parent_email"] = "Please enter a valid email address (e.g., parent@example.com)"
    elif form.student_email and normalize_email(form.student_email) == normalize_email(form.parent_email):
        errors["parent_email"] = "Parent email should be different from student email"

    if not form.parent_phone or not form.parent_phone.strip():
        errors["parent_phone"] = "Parent/guardian phone is required"
    elif not validate_phone(form.parent_phone):
        errors["parent_phone"] = "Please enter a valid 10-digit phone number (e.g., (555) 123-4567)"

    is_valid, error_msg = validate_motivation(form.motivation)
    if not is_valid:
        errors["motivation"] = error_msg

    return errors
