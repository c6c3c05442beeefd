# src/mailview_shell/errors.py


class MailViewError(Exception):
    """Base class for all errors raised by the rendering core."""


class ResourceError(MailViewError):
    """A locally stored attachment could not be read completely."""


class TransportError(MailViewError):
    """Network-class failure while fetching a remote resource."""


class ResourceNotFoundError(MailViewError):
    """The remote or local resource does not exist (not a network failure)."""


class DecodeError(MailViewError):
    """The bytes do not form a decodable image."""
