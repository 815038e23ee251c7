"""Mapping between file names and the MIME types accepted as assets."""

import os

_EXTENSION_MAP = {
    ".pdf": "application/pdf",
}

_MIME_TYPES = frozenset(_EXTENSION_MAP.values())


class UnknownMimeTypeError(ValueError):
    """Raised when no MIME type is known for a file name."""

    def __init__(self, file_name):
        self.file_name = file_name
        super().__init__(f"unknown MIME type for {file_name}")


def _extension(file_name):
    """Return the extension of the last path element, dot included."""
    for separator in {"/", os.sep}:
        file_name = file_name.rsplit(separator, 1)[-1]
    index = file_name.rfind(".")
    return file_name[index:] if index >= 0 else ""


def get_mime_type(file_name):
    """Return the MIME type for ``file_name`` based on its extension."""
    try:
        return _EXTENSION_MAP[_extension(file_name).lower()]
    except KeyError:
        raise UnknownMimeTypeError(file_name) from None


def is_known_mime_type(mime_type):
    """Tell whether ``mime_type`` is one of the supported asset types."""
    return mime_type.lower() in _MIME_TYPES