'''
Boundary for turning the raw spectral block into intensities.

ChromaTOF stores the scan x mass block as 16-bit words. Any callable
with the signature of `unpack` can be handed to LecoPeg to decode them;
the default here takes each word as a detector count. Rows are
independent, so large blocks may be converted across several threads.
'''
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from pegread.errors import ShapeMismatchError


def _unpack_rows(raw, out, st, en):
    out[st:en] = raw[st:en]


def unpack(raw, shape, workers=None):
    """
    Convert raw 16-bit words into a (scans, masses) intensity matrix.

    Parameters
    ----------
    raw : np.ndarray
        1-d array of unsigned 16-bit words in scan-major order.
    shape : tuple of int
        (number of scans, number of masses)
    workers : int, optional
        Number of threads to split the scans over.

    Returns
    -------
    np.ndarray
        int64 matrix of the requested shape
    """
    nscans, nmasses = shape
    raw = np.asarray(raw)
    if raw.size != nscans * nmasses:
        raise ShapeMismatchError(
            None, 'spectral block holds {} values, expected {} scans x {} '
            'masses = {}'.format(raw.size, nscans, nmasses, nscans * nmasses))
    raw = raw.reshape(nscans, nmasses)
    out = np.empty((nscans, nmasses), dtype=np.int64)

    if workers is None or workers < 2 or nscans < workers:
        _unpack_rows(raw, out, 0, nscans)
        return out

    bounds = np.linspace(0, nscans, workers + 1).astype(int)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_unpack_rows, raw, out, st, en)
                   for st, en in zip(bounds[:-1], bounds[1:])]
        for future in futures:
            future.result()
    return out
