'''
Reader for LECO ChromaTOF .peg acquisition files.
'''
import logging

__version__ = '0.1.0'

logging_handler = logging.StreamHandler()


def _attach_handler():
    # only add our handler if nobody has configured logging yet
    corelogger = logging.getLogger(__name__)
    rootlogger = logging.getLogger()
    if not corelogger.handlers and not rootlogger.handlers:
        corelogger.addHandler(logging_handler)


def read_peg(filename, process_spectra=True, unpacker=None, workers=None):
    """
    Decode a .peg file into a PegDataset.

    Parameters
    ----------
    filename : str
    process_spectra : bool, optional
        If False, skip loading the scan x mass intensity matrix.
    unpacker : callable, optional
        Replacement for pegread.tracefile.peg_unpack.unpack.
    workers : int, optional
        Number of threads the default unpacker may use across scans.

    Returns
    -------
    pegread.tracefile.leco_peg.PegDataset
    """
    from pegread.tracefile.leco_peg import LecoPeg
    peg = LecoPeg(filename, process_spectra=process_spectra,
                  unpacker=unpacker, workers=workers)
    return peg.dataset
