"""Input validation for the description a gathering session starts from."""


def validate_input(description: str) -> str:
    """Return the stripped description.

    Raises ValueError if it is not a string or is empty/whitespace-only.
    """
    if not isinstance(description, str) or not description.strip():
        raise ValueError("Description must be a non-empty string.")
    return description.strip()
