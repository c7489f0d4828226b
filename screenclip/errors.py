"""Error taxonomy shared by the workflow components and the HTTP layer.

Every error carries the HTTP status it maps to, so routes can render any
of them as ``{"error": message}`` without a per-route lookup table.
"""


class ScreenClipError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


# -- request validation ---------------------------------------------------

class ValidationError(ScreenClipError):
    status_code = 400


class MissingFields(ValidationError):
    pass


class StatusRegression(ValidationError):
    status_code = 409


# -- configuration --------------------------------------------------------

class ConfigurationError(ScreenClipError):
    status_code = 500


# -- object storage -------------------------------------------------------

class StorageError(ScreenClipError):
    status_code = 502


class StorageUnavailable(StorageError):
    pass


class QuotaExceeded(StorageError):
    status_code = 413


# -- metadata store -------------------------------------------------------

class DatabaseError(ScreenClipError):
    status_code = 500


class StoreUpdateFailed(DatabaseError):
    pass


class NotFound(DatabaseError):
    status_code = 404


class Forbidden(DatabaseError):
    status_code = 403


class PrivateClip(Forbidden):
    pass


class Unauthenticated(DatabaseError):
    status_code = 401


# -- notification ---------------------------------------------------------

class EmailDispatchError(ScreenClipError):
    status_code = 500


class EmailDispatchFailed(EmailDispatchError):
    pass


class TranscodeError(ScreenClipError):
    status_code = 500


# -- local capture (client side only) -------------------------------------

class CaptureError(ScreenClipError):
    status_code = 400


class CaptureUnsupported(CaptureError):
    pass


class PermissionDenied(CaptureError):
    pass


class NoSupportedFormat(CaptureError):
    pass


class EmptyRecording(CaptureError):
    pass


class CaptureStateError(CaptureError):
    pass
