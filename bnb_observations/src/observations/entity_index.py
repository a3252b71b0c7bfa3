from bnb_observations.src.errors import ModelQueryError

import numpy as np


class EntityIndex:
    '''
    Bijection between solver entity keys and [0, n).

    The index of an entity is the position the model reports for it (the
    position of a variable in the original problem, the LP position of a row),
    never the solver's internal identifier, which may be recycled. Feature
    matrices emit one row per entity in this order so that they can be
    aligned by position with an externally maintained action set.
    '''
    def __init__(self, keys):
        self._keys = list(keys)
        self._key_to_idx = {key: idx for idx, key in enumerate(self._keys)}
        if len(self._key_to_idx) != len(self._keys):
            raise ModelQueryError('Model reported the same entity key twice.')

    @classmethod
    def from_entities(cls, entities):
        '''
        Args:
            entities: Objects with a key and a position attribute, in any order.
        '''
        n = len(entities)
        keys = [None] * n
        for entity in entities:
            if not 0 <= entity.position < n or keys[entity.position] is not None:
                raise ModelQueryError(f'Entity positions are not a permutation of [0, {n}).')
            keys[entity.position] = entity.key
        return cls(keys)

    def __len__(self):
        return len(self._keys)

    def __getitem__(self, key):
        return self._key_to_idx[key]

    def __contains__(self, key):
        return key in self._key_to_idx

    def __eq__(self, other):
        if not isinstance(other, EntityIndex):
            return NotImplemented
        return self._keys == other._keys

    def keys(self):
        '''Entity keys, in index order.'''
        return list(self._keys)

    def take(self, keys):
        return np.array([self._key_to_idx[key] for key in keys], dtype=np.int64)


def variable_index(model):
    return EntityIndex.from_entities(model.get_variables())


def row_index(model):
    return EntityIndex.from_entities(model.get_lp_rows())


def constraint_index(model):
    return EntityIndex.from_entities(model.get_constraints())
