import os
import sys

#
# All parameters initialized before loading pydoci_conf.py will be overwritten
# by the dynamic importing procedure.
#

DEBUG = False

VERBOSE = int(os.environ.get('PYDOCI_VERBOSE', 3))  # default logger level (logger.NOTE)
MAX_THREADS = int(os.environ.get('PYDOCI_NUM_THREADS', os.cpu_count() or 1))

# Checkpoint directory of the orbital optimizers
SAVE_H5_PATH = os.environ.get('SAVE_H5_PATH', '.')
# Comma separated irreps which LocalMinimizer is allowed to rotate
DOCI_ALLOWED_IRREPS = os.environ.get('v2DM_DOCI_ALLOWED_IRREPS', '')

READ_SPARSE_H5_FILE = os.environ.get('READ_SPARSE_H5_FILE', None)
SAVE_SPARSE_H5_FILE = os.environ.get('SAVE_SPARSE_H5_FILE', None)

#
# Loading pydoci_conf.py and overwriting above parameters
#
for conf_file in (os.environ.get('PYDOCI_CONFIG_FILE', None),
                  os.path.join(os.path.abspath('.'), '.pydoci_conf.py'),
                  os.path.join(os.environ.get('HOME', '.'), '.pydoci_conf.py')):
    if conf_file is not None and os.path.isfile(conf_file):
        break
else:
    conf_file = None

if conf_file is not None:
    with open(conf_file, 'r') as f:
        exec(f.read())
    del f
del (os, sys)

#
# All parameters initialized after loading pydoci_conf.py will be kept in the
# program.
#
