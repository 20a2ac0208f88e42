"""Custom exceptions for dskclient."""


class DskClientError(Exception):
    """Base exception for dskclient operations."""


class NetworkError(DskClientError):
    """The backend could not be reached or answered with an error status."""


class DecodeError(DskClientError):
    """A response body did not decode into the expected shape."""


class NodeNotFound(DskClientError):
    """The requested node URL is not part of the tree."""


class ParseError(DskClientError):
    """The markup of a document could not be parsed."""


class TransformFallbackUsed(DskClientError):
    """No transform is registered for an element type.

    Raised by the registry lookup and handled by the document transformer,
    which then delegates to the fallback hook or drops the element.
    """

    def __init__(self, type_: str) -> None:
        super().__init__(f"No transform to apply to {type_!r}")
        self.type = type_
