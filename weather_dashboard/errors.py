class WeatherError(RuntimeError):
    """Base for failures that are reported to the caller as an error document."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(WeatherError):
    status_code = 400


class NotFound(WeatherError):
    status_code = 404


class UpstreamError(WeatherError):
    """Network failure, malformed payload or provider-reported error."""

    status_code = 500


class HistoryStoreError(WeatherError):
    status_code = 500
