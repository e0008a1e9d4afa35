# Copyright 2014-2018 The PySCF Developers. All Rights Reserved.
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
Helper functions: logger, configuration parameters, HDF5 checkpoint files,
bit manipulation on numpy arrays and the thread pool used by the builders.
'''

from pydoci.lib import parameters
from pydoci.lib import parameters as param
from pydoci.lib import logger
from pydoci.lib import numpy_helper
from pydoci.lib.numpy_helper import popcount, lowest_bit, lowest_bit_index, \
        bit_indices, pack_tril, unpack_tril
from pydoci.lib import misc
from pydoci.lib.misc import StreamObject, num_threads, with_threads, \
        triangular_partition, map_in_threads, temporary_env, check_sanity
from pydoci.lib import chkfile
