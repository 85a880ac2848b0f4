class PersistenceError(Exception):
    """Raised when a savings target could not be written to the database."""
