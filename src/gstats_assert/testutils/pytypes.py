"""
Type constants used when deciding how two objects should be compared.
"""

import numbers
import weakref
import numpy as np


# Values compared by content, no matter which of these types is used
BytesLikeTypes = (bytes, bytearray, memoryview)

# Reference types that get dereferenced before comparing
ReferenceTypes = (weakref.ReferenceType,)

# Scalar numeric types, including Decimal, Fraction and numpy scalars
NumericTypes = (numbers.Number, np.number)

# Ordered containers that are walked element by element
SequenceTypes = (list, tuple)

SetTypes = (set, frozenset)
