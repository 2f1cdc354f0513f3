class MalformedInputError(ValueError):
    """Raised for user input that cannot be scanned (bad address, bad port)."""
