import numpy as np
import scipy.sparse

from pegread.spectra import Scan
from pegread.trace.math_chromatograms import base_peak_chromatogram


class Trace(object):
    def __init__(self, data, index=None, name=''):
        if index is not None:
            self.values = np.array(data)
            self.index = np.array(index)
            self.name = name
        else:
            raise TypeError('Trace initialized improperly.')

    @property
    def shape(self):
        return self.values.shape

    def __len__(self):
        return self.index.shape[0]

    def __getitem__(self, index):
        v, i = self.values[index], self.index[index]
        if type(v) is np.ndarray:
            return Trace(v, i, self.name)
        else:
            return v

    def twin(self, twin):
        st_idx, en_idx = _slice_idxs(self, twin)
        return self[st_idx:en_idx]


class Chromatogram(object):
    """
    A scans x columns block of intensities, e.g. the full mass
    spectral data of a run.

    Parameters
    ----------
    data : np.ndarray or scipy.sparse.spmatrix
    index : array-like
        Scan times.
    columns : list
        m/z (or other) label for each column.
    """
    def __init__(self, data=None, index=None, columns=None, yunits=None):
        self.yunits = yunits
        if data is None:
            self.values = np.zeros((0, 0))
            self.index = np.array([])
            self.columns = []
        elif index is not None:
            if isinstance(data, list):
                self.values = np.array(data)
            else:
                self.values = data
            self.index = np.array(index)
            self.columns = list(columns)
        else:
            raise TypeError('Chromatogram initialized improperly.')

    @property
    def shape(self):
        return self.values.shape

    def __len__(self):
        return self.index.shape[0]

    def __getitem__(self, key):
        if isinstance(key, tuple):
            # indexing on multiple dimensions
            v = self.values[key]
            i = self.index[key[0]]
            c = np.array(self.columns)[key[1]]
            if np.ndim(c) == 0:
                return Trace(v, i, name=c.item())
            c = c.tolist()
        else:
            v, i = self.values[key], self.index[key]
            c = self.columns
        return Chromatogram(v, i, c, self.yunits)

    def trace(self, name='tic', tol=0.5, twin=None):
        """
        Returns a one-dimensional Trace out of this Chromatogram.

        Parameters
        ----------
        name : str or float
            'tic' (or '' / 'x') for the total intensity, 'bpc' for the
            base peak intensity, or an m/z for an extracted ion trace.
        tol : float
            m/z tolerance for extracted ion traces.
        twin : tuple, optional
            (start time, end time)
        """
        st_idx, en_idx = _slice_idxs(self, twin)

        if isinstance(name, (int, float, np.floating, np.integer)):
            name = str(name)

        if name in ['tic', 'x', '']:
            data = np.asarray(self.values.sum(axis=1)).ravel()
            name = 'tic'
        elif name == 'bpc':
            data = base_peak_chromatogram(self.values, self.columns)
        elif set(name).issubset('1234567890.'):
            cols = np.abs(np.array(self.columns, dtype=float) -
                          float(name)) < tol
            if not np.any(cols):
                data = np.zeros(self.shape[0]) * np.nan
            elif scipy.sparse.issparse(self.values):
                data = self.values[:, cols].toarray().sum(axis=1)
            else:
                data = self.values[:, cols].sum(axis=1)
        else:
            data = np.zeros(self.shape[0]) * np.nan
            name = ''

        return Trace(data[st_idx:en_idx], index=self.index[st_idx:en_idx],
                     name=name)

    def scan(self, t, dt=None, aggfunc=None):
        """
        Returns the spectrum from a specific time.

        Parameters
        ----------
        t : float
        dt : float
            If given, spectra from t to t + dt are combined.
        aggfunc : callable
            How to combine spectra; summed if not given.
        """
        idx = (np.abs(self.index - t)).argmin()

        if dt is None:
            # only take the spectra at the nearest time
            mz_abn = self.values[idx, :].copy()
        else:
            # sum up all the spectra over a range
            en_idx = (np.abs(self.index - t - dt)).argmin()
            idx, en_idx = min(idx, en_idx), max(idx, en_idx)
            if aggfunc is None:
                mz_abn = self.values[idx:en_idx + 1, :].copy().sum(axis=0)
            else:
                mz_abn = aggfunc(self.values[idx:en_idx + 1, :].copy())
        if scipy.sparse.issparse(mz_abn):
            mz_abn = mz_abn.toarray()[0]
        return Scan(self.columns, np.asarray(mz_abn).ravel(),
                    name=self.index[idx])


def _slice_idxs(df, twin=None):
    """
    Returns a slice of the incoming array filtered between
    the two times specified. Assumes the array is the same
    length as self.data. Acts in the time() and trace() functions.
    """
    if twin is None:
        return 0, df.shape[0]

    tme = df.index

    if twin[0] is None:
        st_idx = 0
    else:
        st_idx = (np.abs(tme - twin[0])).argmin()
    if twin[1] is None:
        en_idx = df.shape[0]
    else:
        en_idx = (np.abs(tme - twin[1])).argmin() + 1
    return st_idx, en_idx
