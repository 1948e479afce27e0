class CollaboratorError(RuntimeError):
    """Raised when the catalog or the booking writer fails to answer."""
    pass


class CollaboratorTimeoutError(CollaboratorError):
    """Raised when a collaborator call exceeds its time budget."""
    pass


class MessageDeliveryError(RuntimeError):
    """Raised when the messaging platform rejects a send after all retries."""
    pass
