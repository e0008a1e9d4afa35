# Copyright 2014-2020 The PySCF Developers. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

'''
Some helper functions
'''

import sys
import warnings
from concurrent.futures import ThreadPoolExecutor

from pydoci.lib import parameters as param
from pydoci import __config__

SANITY_CHECK = getattr(__config__, 'SANITY_CHECK', True)

_max_threads = [param.MAX_THREADS]

def num_threads(n=None):
    '''Set the number of worker threads used by the parallel builders.  If
    argument is not specified, the function returns the current setting.

    Examples:

    >>> from pydoci import lib
    >>> lib.num_threads(4)
    4
    >>> print(lib.num_threads())
    4
    '''
    if n is not None:
        n = int(n)
        if n < 1:
            raise ValueError('Number of threads must be positive, got %d' % n)
        _max_threads[0] = n
    return _max_threads[0]

class with_threads:
    '''
    Using this macro to create a temporary context in which the number of
    worker threads are set to the required value. When the program exits the
    context, the number of threads will be restored.

    Examples:

    >>> with lib.with_threads(2):
    ...     ham.build()
    '''
    def __init__(self, nthreads=None):
        self.nthreads = nthreads
        self.sys_threads = None
    def __enter__(self):
        if self.nthreads is not None and self.nthreads >= 1:
            self.sys_threads = num_threads()
            num_threads(self.nthreads)
        return self
    def __exit__(self, type, value, traceback):
        if self.sys_threads is not None:
            num_threads(self.sys_threads)


def triangular_partition(dim, ntasks):
    '''Split the rows of an upper triangular workload (row i costs dim-i)
    into ntasks contiguous ranges of roughly equal cost.

    Returns:
        A list of ntasks+1 row offsets.  Task k processes the rows
        offsets[k] .. offsets[k+1].

    Examples:

    >>> lib.triangular_partition(10, 3)
    [0, 2, 5, 10]
    '''
    ntasks = max(1, int(ntasks))
    size_part = dim * (dim + 1) // 2 // ntasks + 1

    offsets = [0] * (ntasks + 1)
    offsets[-1] = dim
    for k in range(1, ntasks):
        row = offsets[k-1]
        work = 0
        while work < size_part and row < dim:
            work += dim - row
            row += 1
        offsets[k] = min(row, dim)
    return offsets

def map_in_threads(fn, tasks, nthreads=None):
    '''Call fn(*task) for every task in a pool of worker threads and return
    the results in the order of tasks.  Exceptions raised in a worker are
    propagated to the caller.
    '''
    tasks = list(tasks)
    if nthreads is None:
        nthreads = num_threads()
    if nthreads == 1 or len(tasks) <= 1:
        return [fn(*task) for task in tasks]
    with ThreadPoolExecutor(max_workers=nthreads) as executor:
        futures = [executor.submit(fn, *task) for task in tasks]
        return [f.result() for f in futures]


class StreamObject:
    '''For most methods, there are three stream functions to pipe computing stream:

    1 ``.set_`` function to update object attributes, eg
    ``ham = DOCIHamiltonian(mol).set(verbose=4)`` is identical to proceed in
    two steps ``ham = DOCIHamiltonian(mol); ham.verbose=4``

    2 ``.run`` function to execute the kernel function (the function arguments
    are passed to kernel function).  If keyword arguments is given, it will first
    call ``.set`` function to update object attributes then execute the kernel
    function.  Eg
    ``opt = LocalMinimizer(mol).run(conv_crit=1e-7)`` is identical to three steps
    ``opt = LocalMinimizer(mol); opt.conv_crit=1e-7; opt.kernel()``

    3 ``.apply`` function to apply the given function/class to the current object
    (function arguments and keyword arguments are passed to the given function).
    '''

    verbose = getattr(__config__, 'VERBOSE', 3)
    stdout = sys.stdout
    # Store the keys appeared in the module.  It is used to check misinput attributes
    _keys = {'verbose', 'stdout'}

    def kernel(self, *args, **kwargs):
        '''
        Kernel function is the main driver of a method.  Every method should
        define the kernel function as the entry of the calculation.
        '''
        pass

    def run(self, *args, **kwargs):
        '''
        Call the kernel function of current object.  `args` will be passed
        to kernel function.  `kwargs` will be used to update the attributes of
        current object.  The return value of method run is the object itself.
        This allows a series of functions/methods to be executed in pipe.
        '''
        self.set(**kwargs)
        self.kernel(*args)
        return self

    def set(self, *args, **kwargs):
        '''
        Update the attributes of the current object.  The return value of
        method set is the object itself.  This allows a series of
        functions/methods to be executed in pipe.
        '''
        if args:
            warnings.warn('method set() only supports keyword arguments.\n'
                          'Arguments %s are ignored.' % (args,))
        for k,v in kwargs.items():
            setattr(self, k, v)
        return self

    # An alias to .set method
    __call__ = set

    def apply(self, fn, *args, **kwargs):
        '''
        Apply the fn to rest arguments:  return ``fn(*args, **kwargs)``.
        '''
        return fn(self, *args, **kwargs)

    def check_sanity(self):
        '''
        Check input of class/object attributes, check whether a class method is
        overwritten.  It does not check the attributes which are prefixed with
        "_".
        '''
        if SANITY_CHECK and self.verbose > 0:
            cls_keys = [cls._keys for cls in self.__class__.__mro__[:-1]
                        if hasattr(cls, '_keys')]
            keys_ref = set(self._keys).union(*cls_keys)
            check_sanity(self, keys_ref, self.stdout)
        return self


_warn_once_registry = {}
def check_sanity(obj, keysref, stdout=sys.stdout):
    '''Check misinput of class attributes, check whether a class method is
    overwritten.  It does not check the attributes which are prefixed with
    "_".
    '''
    objkeys = [x for x in obj.__dict__ if not x.startswith('_')]
    keysub = set(objkeys) - set(keysref)
    if keysub:
        class_attr = set(dir(obj.__class__))
        keyin = keysub.intersection(class_attr)
        if keyin:
            msg = ('Overwritten attributes  %s  of %s\n' %
                   (' '.join(sorted(keyin)), obj.__class__))
            if msg not in _warn_once_registry:
                _warn_once_registry[msg] = 1
                sys.stderr.write(msg)
                if stdout is not sys.stdout:
                    stdout.write(msg)
        keydiff = keysub - class_attr
        if keydiff:
            msg = ('%s does not have attributes  %s\n' %
                   (obj.__class__, ' '.join(sorted(keydiff))))
            if msg not in _warn_once_registry:
                _warn_once_registry[msg] = 1
                sys.stderr.write(msg)
                if stdout is not sys.stdout:
                    stdout.write(msg)
    return obj


class temporary_env:
    '''Within the context of this macro, the attributes of the object are
    temporarily updated. When the program goes out of the scope of the
    context, the original value of each attribute will be restored.

    Examples:

    >>> with temporary_env(lib.param, MAX_THREADS=1):
    ...     print(lib.param.MAX_THREADS)
    1
    '''
    def __init__(self, obj, **kwargs):
        self.obj = obj
        self.env_bak = [(key, getattr(obj, key, 'TO_DEL')) for key in kwargs]
        self.env_new = [(key, kwargs[key]) for key in kwargs]

    def __enter__(self):
        for k, v in self.env_new:
            setattr(self.obj, k, v)
        return self

    def __exit__(self, type, value, traceback):
        for k, v in self.env_bak:
            if isinstance(v, str) and v == 'TO_DEL':
                delattr(self.obj, k)
            else:
                setattr(self.obj, k, v)

