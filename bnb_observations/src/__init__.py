from bnb_observations.src import errors
from bnb_observations.src import scip
from bnb_observations.src import observations
