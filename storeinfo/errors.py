ERROR_GENERIC = 1000
ERROR_NETWORK_UNAVAILABLE = 1001
ERROR_MALFORMED_URL = 1002


class StoreInfoError(Exception):
    code = ERROR_GENERIC

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class GenericFetchError(StoreInfoError):
    """Selector matched nothing, or the listing answered with a non-OK status."""


class NetworkUnavailable(StoreInfoError):
    code = ERROR_NETWORK_UNAVAILABLE


class MalformedUrl(StoreInfoError):
    code = ERROR_MALFORMED_URL
