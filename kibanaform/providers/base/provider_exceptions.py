class KibanaAlertException(Exception):
    def __init__(self, message, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ClientTypeUnsupported(KibanaAlertException):
    """The client handle does not support the alerting endpoints."""


class UnsupportedVersion(KibanaAlertException):
    def __init__(self, message, version=None):
        super().__init__(message)
        self.version = version


class MalformedSchedule(KibanaAlertException):
    pass


class ActionMappingError(KibanaAlertException):
    def __init__(self, message, index=None):
        super().__init__(message)
        self.index = index


class TransportError(KibanaAlertException):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(TransportError):
    def __init__(self, message, status_code=404):
        super().__init__(message, status_code)


class DecodeError(KibanaAlertException):
    pass
