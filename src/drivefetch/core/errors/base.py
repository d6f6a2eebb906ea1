"""Root of the drivefetch exception hierarchy."""


class DriveFetchError(Exception):
    """Base exception for every error raised by the fetch-and-reassemble engine."""
