class ObservationError(Exception):
    '''Base class for errors raised while extracting observations.'''


class ResetRequiredError(ObservationError):
    '''
    Raised when an observation function is asked to extract before its
    before_reset hook has been called for the episode.
    '''


class ModelQueryError(ObservationError):
    '''
    Raised when the model cannot answer a query in its current state (e.g.
    the LP relaxation of the focus node has not been solved). The extraction
    call that issued the query fails as a whole.
    '''
