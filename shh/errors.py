class ShhError(Exception):
    """Base class for every error raised by the shh package."""
    pass


class MalformedEnvelopeError(ShhError, ValueError):
    """Raised when wire bytes do not decode to a 5-field envelope record."""
    pass


class InvalidTopicError(ShhError, ValueError):
    """Raised when a full topic part is not a 32-byte value."""
    pass


class SignatureRoundTripError(ShhError):
    '''
    Raised by sealing when a freshly produced signature does not recover to the
    signer's own public key. This points at a broken signature primitive, not at
    bad input, so nothing inside the package catches it.
    '''
    pass
