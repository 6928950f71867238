import numpy as np
import scipy.sparse


def _as_matrix(df, masses=None):
    # accept a Chromatogram as well as a bare matrix
    if hasattr(df, 'columns') and hasattr(df, 'values'):
        if masses is None:
            masses = df.columns
        df = df.values
    return df, masses


def base_peak_chromatogram(df, masses=None, eic_grid=None):
    """
    The most intense signal in each scan.

    Parameters
    ----------
    df : np.ndarray, scipy.sparse matrix or Chromatogram
        Intensities, scans x masses.
    masses : array-like
        m/z of each column of df; taken from df.columns if df is a
        Chromatogram.
    eic_grid : array-like, optional
        One row of m/z values per extracted ion chromatogram; zeros pad
        out short rows. If given, each row's masses are summed into a
        single column first and the maximum is taken over those columns.
        m/z values that aren't in masses are ignored.

    Returns
    -------
    np.ndarray
    """
    data, masses = _as_matrix(df, masses)
    sparse = scipy.sparse.issparse(data)
    if not sparse:
        data = np.asarray(data)
    if eic_grid is None:
        if not sparse:
            return data.max(axis=1, initial=0)
        if data.shape[1] == 0:
            return np.zeros(data.shape[0], dtype=data.dtype)
        return data.max(axis=1).toarray().ravel()

    masses = np.asarray(masses)
    # integer intensities stay integers
    eics = np.zeros((data.shape[0], len(eic_grid)),
                    dtype=np.result_type(data.dtype, np.int64))
    for i, row in enumerate(eic_grid):
        row = np.asarray(row)
        locs = np.isin(masses, row[row != 0])
        if sparse:
            eics[:, i] = data[:, locs].toarray().sum(axis=1)
        else:
            eics[:, i] = data[:, locs].sum(axis=1)
    return eics.max(axis=1, initial=0)
