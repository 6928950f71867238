'''
Exceptions raised while decoding .peg files.

Every error carries the path of the offending file and a description of
what went wrong; decoding of that file stops at the first one.
'''


class PegError(Exception):
    def __init__(self, filename, reason):
        super(PegError, self).__init__(filename, reason)
        self.filename = filename
        self.reason = reason

    def __str__(self):
        if self.filename is None:
            return self.reason
        return '{}: {}'.format(self.filename, self.reason)


class PegNotFoundError(PegError):
    """The path does not point at a readable file."""


class UnrecognizedFormatError(PegError):
    """The magic number is not one of the known .peg generations."""


class CorruptHeaderError(PegError):
    """The magic number is zero, i.e. the header was zero-filled."""


class MalformedModulationTableError(PegError):
    """The modulation table ran off the header without a -1 sentinel."""


class InvalidAcquisitionRateError(PegError):
    """The data rate is not a positive, finite number."""


class ShapeMismatchError(PegError):
    """The spectral block does not hold num_scans * mass_range values."""


class MissingSegmentError(PegError):
    """A header segment needed for decoding could not be located."""


class TruncatedFileError(PegError):
    """A fixed-offset read ran past the end of the file."""
