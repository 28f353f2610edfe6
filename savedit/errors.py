"""Exception hierarchy for savedit commands."""


class SaveditError(Exception):
    """Base class for every error reported by the CLI."""


class StreamError(SaveditError, OSError):
    """Input or output stream could not be opened, read or written."""


class DecodeError(SaveditError):
    """Binary data is not a valid save for the selected codec."""


class EncodeError(SaveditError):
    """Document could not be serialized back to binary."""


class MalformedText(SaveditError):
    """Text does not parse back into a save document.

    Attributes:
        location: Where the problem is (line/column or field path), if known.
    """

    def __init__(self, message: str, location: str | None = None) -> None:
        if location:
            message = f'{location}: {message}'
        super().__init__(message)
        self.location = location


class EditorInvocationError(SaveditError):
    """Editor command is empty, cannot be tokenized or cannot be started."""


class ResaveMismatch(SaveditError):
    """Decode -> encode did not reproduce the original bytes."""


class CodecLookupError(SaveditError):
    """Requested codec is unknown or cannot be loaded."""
