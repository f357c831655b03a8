"""Exception types for Picasa Info Extractor.

Everything raised here is fatal for an extraction run. Recoverable problems
(unreadable images, unknown contact ids, unrecognized ini content) are logged
instead of raised.
"""


class PIEError(Exception):
    """Base class for extraction failures."""


class FormatError(PIEError, ValueError):
    """A rect64 value could not be decoded."""


class MalformedFaceTagError(PIEError, ValueError):
    """A faces= record contains an entry that is not rect64(<hex>),<id>."""


class DuplicateKeyError(PIEError, KeyError):
    """An album key was assigned twice in one run."""


class ContactsFileError(PIEError):
    """The Picasa contacts file could not be parsed."""


class OutputExistsError(PIEError):
    """An output file exists and overwriting was not allowed."""
