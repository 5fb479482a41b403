class GigListError(Exception):
    """Base class for errors raised by the gig list pipeline."""


class MissingCredentialError(GigListError):
    def __init__(self, names):
        self.names = list(names)
        super().__init__(f"Missing required environment variable(s): {', '.join(self.names)}")


class PaginationError(GigListError):
    """A paginated listing returned a page that could not be understood."""


class ExtractionError(GigListError):
    """An event page had markup that no extraction rule could interpret."""


class StageError(GigListError):
    """Wraps a failure with the pipeline stage and cache key being processed."""

    def __init__(self, stage, key, cause=None):
        self.stage = stage
        self.key = key
        self.cause = cause
        message = f"{stage} failed for {key}"
        if cause is not None:
            message += f": {type(cause).__name__}: {cause}"
        super().__init__(message)
