# changelog/markdown/exceptions.py


class ExtensionError(ValueError):
    """Raised when an extension cannot be registered as given."""
