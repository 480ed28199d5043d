"""Checkout form validation"""

import re

from ..models.checkout import ShippingAddress

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_DIGITS = 10
PINCODE_DIGITS = 6

REQUIRED_FIELDS = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "address": "Address is required",
    "city": "City is required",
    "state": "State is required",
}


def validate_shipping_address(address: ShippingAddress) -> dict[str, str]:
    """
    Validate the shipping address form.

    Args:
        address: Form values as entered by the shopper

    Returns:
        Field name -> error message; empty when the form is valid
    """
    errors: dict[str, str] = {}

    for field, message in REQUIRED_FIELDS.items():
        if not getattr(address, field).strip():
            errors[field] = message

    email = address.email.strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = "Enter a valid email address"

    phone = re.sub(r"\s+", "", address.phone)
    if not phone:
        errors["phone"] = "Phone number is required"
    elif not re.fullmatch(rf"\d{{{PHONE_DIGITS}}}", phone):
        errors["phone"] = f"Enter a valid {PHONE_DIGITS}-digit phone number"

    pincode = address.pincode.strip()
    if not pincode:
        errors["pincode"] = "Pincode is required"
    elif not re.fullmatch(rf"\d{{{PINCODE_DIGITS}}}", pincode):
        errors["pincode"] = f"Enter a valid {PINCODE_DIGITS}-digit pincode"

    return errors
