import numpy as np

from pegread.trace import Chromatogram, Trace


def test_twin():
    a = Trace(np.arange(10.), np.arange(10.) / 10., name='tic')
    assert len(a.twin((0.2, 0.5))) == 4
    assert a.twin((0.2, 0.5)).values.tolist() == [2., 3., 4., 5.]
    assert len(a.twin(None)) == 10


def test_chromatogram_trace():
    c = Chromatogram(np.array([[1, 5, 2], [9, 0, 1], [3, 3, 3]]),
                     [0.5, 1.0, 1.5], [40, 41, 42])
    assert c.trace('tic').values.tolist() == [8, 10, 9]
    assert c.trace('bpc').values.tolist() == [5, 9, 3]
    assert c.trace(41).values.tolist() == [5, 0, 3]
    assert np.all(np.isnan(c.trace(99).values))
    assert c.trace('tic', twin=(1.0, 1.5)).values.tolist() == [10, 9]


def test_chromatogram_scan():
    c = Chromatogram(np.array([[1, 5, 2], [9, 0, 1], [3, 3, 3]]),
                     [0.5, 1.0, 1.5], [40, 41, 42])
    s = c.scan(0.9)
    assert s.abn.tolist() == [9, 0, 1]
    assert c.scan(0.5, dt=0.5).abn.tolist() == [10, 5, 3]
