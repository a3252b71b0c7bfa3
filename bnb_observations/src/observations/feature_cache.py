from loguru import logger


class FeatureCache:
    '''
    Static features of one observation function instance for one episode.

    Entries are computed on first use and reused until clear() is called,
    which observation functions do in before_reset. The cache remembers the
    structural signature of the model it was filled from (e.g. number of
    variables and LP rows). Reusing static features is only valid while that
    structure does not change, e.g. when no cutting planes are added during
    the episode; if the signature differs the cache is rebuilt and a warning
    is logged.
    '''
    def __init__(self, name='cache'):
        self.name = name
        self.clear()

    def clear(self):
        self._entries = {}
        self.signature = None

    def is_empty(self):
        return len(self._entries) == 0

    def validate(self, signature):
        '''Drops all entries if signature differs from the one the cache was built for.'''
        if self.signature is not None and self.signature != signature:
            logger.warning(f'{self.name}: model structure changed within the episode, rebuilding static feature cache.')
            self._entries = {}
        self.signature = signature

    def get(self, key, compute_fn):
        if key not in self._entries:
            logger.debug(f'{self.name}: computing static feature {key}')
            self._entries[key] = compute_fn()
        return self._entries[key]

    def __contains__(self, key):
        return key in self._entries
