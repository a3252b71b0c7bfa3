from bnb_observations.src.errors import ResetRequiredError, ModelQueryError

import abc

from loguru import logger


def require_solved_lp(model):
    '''Fails the extraction when the LP relaxation of the focus node is not solved.'''
    if not model.is_lp_solved():
        raise ModelQueryError('The LP relaxation of the focus node is not solved.')


class ObservationFunction(abc.ABC):
    '''
    Shared interface of all observation functions.

    The control loop calls before_reset(model) once at the start of every
    episode, then extract(model, done) once per decision point. An instance
    starts uninitialised; extracting before the first before_reset raises
    ResetRequiredError. Subclasses overriding before_reset must call
    super().before_reset(model) and implement _extract.
    '''
    def __init__(self):
        self._ready = False

    def before_reset(self, model):
        if self._ready:
            logger.debug(f'{type(self).__name__}: re-initialising for a new episode')
        self._ready = True

    def extract(self, model, done):
        if not self._ready:
            raise ResetRequiredError(f'{type(self).__name__}.extract called before before_reset.')
        return self._extract(model, done)

    @abc.abstractmethod
    def _extract(self, model, done):
        pass
