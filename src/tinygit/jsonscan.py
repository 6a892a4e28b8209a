"""Minimal string-field extraction from provider API responses.

Not a JSON parser: finds the first occurrence of
``"key":"`` or ``"key": "`` in the text and returns everything up to the
next double quote. It does not understand escape sequences, nesting, or
non-string values, so it is only suitable for simple top-level string
fields such as ``tag_name`` and ``default_branch``. Use ``json.loads`` for
anything that needs structure.
"""


def extract_string_field(text: str, key: str) -> str | None:
    """Return the value of a top-level string field, or None if absent.

    Args:
        text: Raw response body.
        key: Field name to look for.

    Returns:
        The characters between the opening quote and the next ``"``, or
        None if the key is missing or the value is unterminated. An empty
        string is returned as-is; callers decide whether that counts.
    """
    for pattern in (f'"{key}":"', f'"{key}": "'):
        start = text.find(pattern)
        if start != -1:
            break
    else:
        return None

    start += len(pattern)
    end = text.find('"', start)
    if end == -1:
        return None
    return text[start:end]
