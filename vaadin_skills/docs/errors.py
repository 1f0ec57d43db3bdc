"""Errors raised by the documentation library."""


class DocsError(Exception):
    """Base class; the message is returned to the caller verbatim."""


class InvalidArgumentError(DocsError):
    pass


class UnknownVersionError(DocsError):
    pass


class DocumentNotFoundError(DocsError):
    pass


class ComponentNotFoundError(DocsError):
    pass
