class PresentationPackageError(Exception):
    """The uploaded file is not a presentation package this service can patch."""


class PackageSerializationError(Exception):
    """Re-encoding the patched package failed."""
