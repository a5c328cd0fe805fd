class StorageError(Exception):
    """A storage collaborator failed to complete a request."""


class ArchiveError(StorageError):
    """Archiving a finished session failed; the current pointer was kept."""
