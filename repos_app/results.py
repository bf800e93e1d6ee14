class NotFound:
    """Outcome of a lookup that found nothing. Use the ``NOT_FOUND`` instance."""

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = NotFound()


class StoreError(Exception):
    """Reading the object store failed (I/O, corruption, broken iteration)."""


class Unprocessable(Exception):
    """A valid request the engine refuses to answer, e.g. patching a root commit."""
