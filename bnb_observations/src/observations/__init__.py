from bnb_observations.src.observations.coo_matrix import CooMatrix
from bnb_observations.src.observations.entity_index import EntityIndex, variable_index, row_index, constraint_index
from bnb_observations.src.observations.feature_cache import FeatureCache
from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.observation_value import ObservationValue
from bnb_observations.src.observations.candidates import select_candidates, fill_candidates
from bnb_observations.src.observations.node_bipartite import NodeBipartite, NodeBipartiteObs
from bnb_observations.src.observations.milp_bipartite import MilpBipartite, MilpBipartiteObs
from bnb_observations.src.observations.strong_branching_scores import StrongBranchingScores
from bnb_observations.src.observations.pseudocosts import Pseudocosts
from bnb_observations.src.observations.khalil_2016 import Khalil2016, Khalil2016Obs
from bnb_observations.src.observations.hutter_2011 import Hutter2011, Hutter2011Obs
from bnb_observations.src.observations.focus_node import FocusNode, FocusNodeObs
from bnb_observations.src.observations.capacity import Capacity
from bnb_observations.src.observations.weight import Weight
from bnb_observations.src.observations.nothing import Nothing
from bnb_observations.src.observations.factory import make_observation_function, load_config, extract_all, before_reset_all
