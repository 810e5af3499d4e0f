import re
from django.contrib.auth.models import User
from rest_framework.exceptions import ValidationError

EMAIL_REGEX = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
SPECIAL_CHARACTER_REGEX = r"[!@#$%^&*(),.?\":{}|<>]"
ALLOWED_IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp')


def validate_email_format(email: str):
    """Checks the email format"""
    if not re.match(EMAIL_REGEX, email):
        raise ValidationError({"email": "Invalid email address."})


def validate_email_unique(email: str):
    """Checks if email already exists"""
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError({"email": "Email address is already in use."})


def validate_password_strength(password: str):
    """Checks the password strength"""
    if len(password) < 8:
        raise ValidationError(
            {"password": "Password must be at least 8 characters long."})
    if not re.search(r"[A-Z]", password):
        raise ValidationError(
            {"password": "At least one uppercase letter is required."})
    if not re.search(r"[a-z]", password):
        raise ValidationError(
            {"password": "At least one lowercase letter is required."})
    if not re.search(r"\d", password):
        raise ValidationError(
            {"password": "At least one digit is required."})
    if not re.search(SPECIAL_CHARACTER_REGEX, password):
        raise ValidationError(
            {"password": "At least one special character is required."})


def validate_non_empty(value, field_name: str) -> str:
    """Rejects blank or non-string values and returns the stripped string"""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError({field_name: f"{field_name} must not be empty."})
    return value.strip()


def validate_image_filename(name: str) -> str:
    """Accepts only file names with a known image extension"""
    lowered = (name or '').lower()
    if not lowered.endswith(ALLOWED_IMAGE_EXTENSIONS):
        raise ValidationError({"files": f"Unsupported image type: {name}"})
    return name
