"""
Shared helpers for the element classifier: constants, exceptions, error
handling and artifact IO.

Importing this package turns on pandas Copy-on-Write, so column slices taken
from the loaded element frame never write back into it.
"""

import pandas as pd

pd.options.mode.copy_on_write = True
