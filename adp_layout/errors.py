class AdpLayoutError(Exception):
    """Base class for errors raised by adp_layout."""

    pass


class MalformedAnalyzerResult(AdpLayoutError):
    """Raised when an analyzer result document cannot be parsed as JSON at all."""

    pass

