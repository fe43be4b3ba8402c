"""
Custom exceptions for the application.
"""


class VocabTrainerException(Exception):
    """Base exception for all vocab trainer application exceptions."""
    pass


class ValidationError(VocabTrainerException):
    """Raised when validation fails."""
    pass


class NotFoundError(VocabTrainerException):
    """Raised when a requested resource is not found."""
    pass


class SnapshotUnavailableError(VocabTrainerException):
    """Raised when the card snapshot cannot be fetched, so due cards cannot be determined."""
    pass


class PersistError(VocabTrainerException):
    """Raised when a card's new review state could not be saved."""

    def __init__(self, reason: str, card_id: str = None):
        super().__init__(reason)
        self.reason = reason
        self.card_id = card_id


class InvalidSessionStateError(VocabTrainerException):
    """Raised when a review is submitted while no card is being shown."""
    pass
