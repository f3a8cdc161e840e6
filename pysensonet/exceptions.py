class PySensonetException(Exception):
    pass


class InvalidConfigurationParameter(PySensonetException):
    pass


class RemoteError(PySensonetException):
    """
    Non-2xx (or undecodable) response from the sensonet API.

    The status code and raw response body are kept for diagnostics.
    """

    def __init__(self, status: int, body: str = "", url: str = "", method: str = "GET"):
        self.status = status
        self.body = body
        self.url = url
        self.method = method
        super().__init__(f"{method} {url} failed with status {status}")


class NotFoundError(PySensonetException):
    pass


class EmptyResultError(PySensonetException):
    pass


class SensonetConnectionError(PySensonetException):
    pass


class TokenRefreshError(PySensonetException):
    pass
