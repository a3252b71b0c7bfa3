from bnb_observations.src.observations.observation_function import ObservationFunction


class Nothing(ObservationFunction):
    '''
    Observation function returning None, for environments where no observation
    is needed. Both hooks are no-ops, so extract never raises, not even before
    the first before_reset.
    '''
    def before_reset(self, model):
        pass

    def extract(self, model, done):
        return None

    def _extract(self, model, done):
        return None
