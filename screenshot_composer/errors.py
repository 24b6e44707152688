from __future__ import annotations


class ScreenshotServiceError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InvalidRequestError(ScreenshotServiceError):
    status_code = 400


class BackgroundFetchError(ScreenshotServiceError):
    pass


class ScreenshotGenerationError(ScreenshotServiceError):
    pass


class ServiceBusyError(ScreenshotServiceError):
    status_code = 503

    def __init__(self, message: str = "", retry_after_s: int = 2):
        super().__init__(message)
        self.retry_after_s = retry_after_s
