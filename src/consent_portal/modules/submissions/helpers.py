"""
Submission Helpers

Parsing of the per-image ages sent alongside the images.
"""

import json

from consent_portal.modules.submissions.errors import InvalidSubmissionError


def _parse_age(value: object) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not an age")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"not an age: {value!r}")


def parse_image_ages(raw: str, expected_count: int) -> list[int | None]:
    """
    Parse the ``imageAges`` form field.

    The field is a JSON array aligned by position with the uploaded images.
    Entries may be integers, numeric strings, empty strings or null; the last
    two mean the age is unknown.

    Args:
        raw: JSON-encoded array from the form
        expected_count: Number of image parts received

    Returns:
        One age (or None) per image, in upload order

    Raises:
        InvalidSubmissionError: If the field is not a JSON array of ages or its
            length differs from the number of images
    """
    try:
        values = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidSubmissionError("imageAges must be a JSON array.") from e

    if not isinstance(values, list):
        raise InvalidSubmissionError("imageAges must be a JSON array.")

    if len(values) != expected_count:
        raise InvalidSubmissionError(
            f"imageAges has {len(values)} entries but {expected_count} image(s) were uploaded."
        )

    try:
        return [_parse_age(value) for value in values]
    except ValueError as e:
        raise InvalidSubmissionError("imageAges must contain only whole numbers.") from e
