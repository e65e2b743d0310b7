class IndexingFailure(Exception):
    """Raised when the indexing workflow rejects or never receives a document."""
