from bnb_observations.src import errors, scip, observations
from bnb_observations.src.observations import make_observation_function
