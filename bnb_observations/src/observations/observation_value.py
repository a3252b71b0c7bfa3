import copy
import dataclasses

import numpy as np


class ObservationValue:
    '''
    Value semantics for observation dataclasses holding numpy arrays.

    Two observations are equal when all their fields are equal, with NaN
    entries of arrays comparing equal so that a decoded copy equals its
    source. Copies never share arrays with the original.
    '''
    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        for field in dataclasses.fields(self):
            a, b = getattr(self, field.name), getattr(other, field.name)
            if isinstance(a, np.ndarray):
                if not isinstance(b, np.ndarray) or a.shape != b.shape or not np.array_equal(a, b, equal_nan=True):
                    return False
            elif isinstance(a, float) and isinstance(b, float) and np.isnan(a) and np.isnan(b):
                continue
            elif a != b:
                return False
        return True

    def copy(self):
        return copy.deepcopy(self)

    def __copy__(self):
        return self.copy()
