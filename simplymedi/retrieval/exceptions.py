class RetrievalFailure(Exception):
    """Raised when the retrieval workflow gives no usable answer."""
