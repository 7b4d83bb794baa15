"""In-process repository implementations."""
