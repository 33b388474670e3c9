"""Exception hierarchy for the listings core.

Expected negatives (unknown property id, no filter matches) are ordinary
return values, not exceptions. Only malformed input and infrastructure
faults are raised.
"""


class Estate360Error(Exception):
    """Base exception for all estate360 errors."""


class InvalidInputError(Estate360Error):
    """Raised when a required identifier is missing or a payload is malformed.

    Always raised before any file or store I/O takes place.
    """


class StorageUnavailableError(Estate360Error):
    """Raised when the record store or the uploads directory cannot be used.

    Covers directory creation failures, a failed write-capability probe
    (disk full, permissions), failed writes and an undecodable store file.
    """
