import numpy as np
import scipy.sparse

from pegread import read_peg
from pegread.trace import Chromatogram
from pegread.trace.math_chromatograms import base_peak_chromatogram


def _matrix():
    rng = np.random.RandomState(42)
    return rng.randint(0, 1000, size=(3, 200))


def test_bpc_without_eics():
    m = _matrix()
    masses = np.arange(50, 250)
    assert np.array_equal(base_peak_chromatogram(m, masses), m.max(axis=1))


def test_bpc_with_eics():
    m = _matrix()
    masses = np.arange(50, 250)
    bpc = base_peak_chromatogram(m, masses, [[100, 101]])
    # m/z 100 and 101 are columns 50 and 51
    expected = [m[i, 50] + m[i, 51] for i in range(3)]
    assert bpc.tolist() == expected


def test_bpc_multiple_eics():
    m = _matrix()
    masses = np.arange(50, 250)
    grid = [[100, 101, 0, 0], [60, 0, 0, 0], [400, 0, 0, 0]]
    bpc = base_peak_chromatogram(m, masses, grid)
    a = m[:, 50] + m[:, 51]
    b = m[:, 10]
    # m/z 400 isn't measured, so that chromatogram is all zeros
    assert bpc.tolist() == np.maximum(a, b).tolist()


def test_bpc_sparse_and_chromatogram():
    m = _matrix()
    masses = list(range(50, 250))
    grid = [[100, 101]]
    dense = base_peak_chromatogram(m, masses, grid)
    sparse = base_peak_chromatogram(scipy.sparse.csr_matrix(m), masses, grid)
    assert np.array_equal(dense, sparse)
    assert np.array_equal(
        base_peak_chromatogram(scipy.sparse.csr_matrix(m), masses),
        m.max(axis=1))

    c = Chromatogram(m, [0.1, 0.2, 0.3], masses)
    assert np.array_equal(base_peak_chromatogram(c, eic_grid=grid), dense)


def test_bpc_integer_eics():
    m = _matrix()
    masses = np.arange(50, 250)
    bpc = base_peak_chromatogram(m.astype('<u2'), masses, [[100, 101]])
    assert np.issubdtype(bpc.dtype, np.integer)
    assert base_peak_chromatogram(m.astype(float), masses,
                                  [[100]]).dtype == float


def test_bpc_no_columns():
    m = np.arange(6).reshape(3, 2)
    assert base_peak_chromatogram(m, [10, 11], []).tolist() == [0, 0, 0]
    empty = np.zeros((3, 0), dtype='<u2')
    assert base_peak_chromatogram(empty, []).tolist() == [0, 0, 0]
    sparse = base_peak_chromatogram(scipy.sparse.csr_matrix(empty), [])
    assert sparse.tolist() == [0, 0, 0]


def test_bpc_empty_mass_range(write_peg):
    ds = read_peg(write_peg(mass_range=0, num_scans=3))
    assert ds.specdata.shape == (3, 0)
    bpc = base_peak_chromatogram(ds.specdata, ds.masses)
    assert bpc.tolist() == [0, 0, 0]
    assert np.array_equal(bpc, ds.bpc)
