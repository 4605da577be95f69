class InvalidParameter(ValueError):
    """Raised when a pipeline parameter (threshold, sigma) is out of range."""
