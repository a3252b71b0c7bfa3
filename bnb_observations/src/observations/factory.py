from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.node_bipartite import NodeBipartite
from bnb_observations.src.observations.milp_bipartite import MilpBipartite
from bnb_observations.src.observations.strong_branching_scores import StrongBranchingScores
from bnb_observations.src.observations.pseudocosts import Pseudocosts
from bnb_observations.src.observations.khalil_2016 import Khalil2016
from bnb_observations.src.observations.hutter_2011 import Hutter2011
from bnb_observations.src.observations.focus_node import FocusNode
from bnb_observations.src.observations.capacity import Capacity
from bnb_observations.src.observations.weight import Weight
from bnb_observations.src.observations.nothing import Nothing

import json

import ml_collections
from loguru import logger


OBSERVATION_FUNCTIONS = {
    'default': NodeBipartite,
    'node_bipartite': NodeBipartite,
    'milp_bipartite': MilpBipartite,
    'strong_branching_scores': StrongBranchingScores,
    'pseudocosts': Pseudocosts,
    'khalil_2016': Khalil2016,
    'hutter_2011': Hutter2011,
    'focus_node': FocusNode,
    'capacity': Capacity,
    'weight': Weight,
    'nothing': Nothing,
}


def load_config(path):
    '''Loads an ml_collections.ConfigDict from a .json file.'''
    with open(path, 'r') as f:
        return ml_collections.ConfigDict(json.load(f))


def make_observation_function(observation_function='default', **kwargs):
    '''
    Args:
        observation_function (str, dict, ml_collections.ConfigDict, ObservationFunction):
            One of:
                - a name, one of OBSERVATION_FUNCTIONS ('default', 'node_bipartite',
                  'milp_bipartite', 'strong_branching_scores', 'pseudocosts',
                  'khalil_2016', 'hutter_2011', 'focus_node', 'capacity', 'weight',
                  'nothing'), or the path of a .json config;
                - a config (dict or ConfigDict) with a name entry, the remaining
                  entries being passed to the constructor;
                - an ObservationFunction, returned unchanged;
                - a dict of any of the above not holding a name entry, in
                  which case a dict of observation functions is returned and
                  each is extracted under its own key.
        kwargs: Constructor arguments, used when observation_function is a name.
    '''
    if isinstance(observation_function, ObservationFunction):
        return observation_function

    if isinstance(observation_function, str):
        if observation_function.endswith('.json'):
            return make_observation_function(load_config(observation_function), **kwargs)
        if observation_function not in OBSERVATION_FUNCTIONS:
            raise ValueError(f'Unrecognised observation_function {observation_function}')
        logger.debug(f'Initialising {observation_function} observation function with kwargs {kwargs}')
        return OBSERVATION_FUNCTIONS[observation_function](**kwargs)

    if isinstance(observation_function, (dict, ml_collections.ConfigDict)):
        if 'name' in observation_function.keys():
            params = ml_collections.ConfigDict(observation_function).to_dict()
            name = params.pop('name')
            params.update(kwargs)
            return make_observation_function(name, **params)
        return {key: make_observation_function(value) for key, value in observation_function.items()}

    raise ValueError(f'Unrecognised observation_function {observation_function}')


def extract_all(observation_functions, model, done):
    '''Extracts from an observation function or from a dict of observation functions.'''
    if isinstance(observation_functions, dict):
        return {key: extract_all(func, model, done) for key, func in observation_functions.items()}
    return observation_functions.extract(model, done)


def before_reset_all(observation_functions, model):
    if isinstance(observation_functions, dict):
        for func in observation_functions.values():
            before_reset_all(func, model)
    else:
        observation_functions.before_reset(model)
