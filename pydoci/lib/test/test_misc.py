#!/usr/bin/env python

import io
import unittest
import tempfile
import threading
import numpy
from pydoci import lib
from pydoci.lib import logger


class KnowValues(unittest.TestCase):
    def test_triangular_partition(self):
        self.assertEqual(lib.triangular_partition(10, 3), [0, 2, 5, 10])
        self.assertEqual(lib.triangular_partition(7, 1), [0, 7])
        for dim, ntasks in [(100, 4), (20, 7), (3, 5), (1, 2)]:
            offsets = lib.triangular_partition(dim, ntasks)
            self.assertEqual(len(offsets), ntasks+1)
            self.assertEqual(offsets[0], 0)
            self.assertEqual(offsets[-1], dim)
            self.assertTrue(all(x <= y for x, y in zip(offsets, offsets[1:])))
        offsets = lib.triangular_partition(100, 4)
        work = [sum(100-i for i in range(p0, p1)) for p0, p1 in
                zip(offsets, offsets[1:])]
        self.assertTrue(max(work) - min(work) < 250)

    def test_map_in_threads(self):
        res = lib.map_in_threads(lambda a, b: a * b, [(i, 2) for i in range(9)], 4)
        self.assertEqual(res, [i*2 for i in range(9)])

        def fail(i):
            if i == 3:
                raise KeyError(i)
            return i
        self.assertRaises(KeyError, lib.map_in_threads, fail,
                          [(i,) for i in range(5)], 3)

        names = lib.map_in_threads(lambda: threading.current_thread().name,
                                   [()], 4)
        self.assertEqual(len(names), 1)

    def test_num_threads(self):
        n = lib.num_threads()
        with lib.with_threads(3):
            self.assertEqual(lib.num_threads(), 3)
        self.assertEqual(lib.num_threads(), n)
        self.assertRaises(ValueError, lib.num_threads, 0)

    def test_temporary_env(self):
        class Obj:
            a = 1
        with lib.temporary_env(Obj, a=2, b=3):
            self.assertEqual(Obj.a, 2)
            self.assertEqual(Obj.b, 3)
        self.assertEqual(Obj.a, 1)
        self.assertFalse(hasattr(Obj, 'b'))

    def test_chkfile(self):
        ftmp = tempfile.NamedTemporaryFile()
        lib.chkfile.dump(ftmp.name, 'unitary', numpy.eye(3))
        lib.chkfile.dump(ftmp.name, 'grp', {'x': numpy.arange(4), 'y': 2.5})
        self.assertTrue(numpy.array_equal(lib.chkfile.load(ftmp.name, 'unitary'),
                                          numpy.eye(3)))
        grp = lib.chkfile.load(ftmp.name, 'grp')
        self.assertEqual(grp['x'].tolist(), [0, 1, 2, 3])
        self.assertEqual(grp['y'], 2.5)
        self.assertTrue(lib.chkfile.load(ftmp.name, 'none') is None)

    def test_logger(self):
        out = io.StringIO()
        log = logger.Logger(out, logger.INFO)
        log.info('info %d', 1)
        log.debug('debug %d', 2)
        log.warn('warn')
        self.assertTrue('info 1' in out.getvalue())
        self.assertFalse('debug 2' in out.getvalue())
        self.assertTrue('WARN: warn' in out.getvalue())
        self.assertTrue(logger.new_logger(verbose=log) is log)

        obj = lib.StreamObject()
        obj.stdout = out
        obj.verbose = logger.DEBUG
        log1 = logger.new_logger(obj)
        self.assertEqual(log1.verbose, logger.DEBUG)
        self.assertTrue(log1.stdout is out)
        self.assertEqual(logger.new_logger(obj, 0).verbose, 0)
        t0 = (logger.process_clock(), logger.perf_counter())
        log1.timer('step', *t0)
        self.assertTrue('CPU time for step' in out.getvalue())


if __name__ == "__main__":
    print("Full Tests for misc")
    unittest.main()
