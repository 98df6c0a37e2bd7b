from __future__ import annotations


class ImageProcError(Exception):
    """Base class for every failure raised by ps-imgproc."""


class UnsupportedFormat(ImageProcError, ValueError):
    pass


class OpenFailed(ImageProcError):
    pass


class ConstraintViolation(ImageProcError, ValueError):
    pass


class SaveFailed(ImageProcError):
    pass


class ActionNotImplemented(ImageProcError, NotImplementedError):
    pass


class ExternalApplicationUnavailable(ImageProcError, RuntimeError):
    pass


class HostError(ImageProcError):
    """Raised by a host binding when the application rejects a call."""
