"""Small helpers shared across the package."""


def is_number(s):
    """Return True if ``s`` is a non-empty string made only of ASCII digits."""
    return bool(s) and all("0" <= c <= "9" for c in s)


def remove_all(items, value):
    """Remove every occurrence of ``value`` from the list ``items`` in place."""
    items[:] = [item for item in items if item != value]