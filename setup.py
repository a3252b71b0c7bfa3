import setuptools

setuptools.setup(name="bnb_observations",
                 version="0.0.1",
                 description="Observation functions turning the state of a branch & bound solver into numerical features.",
                 packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
                 install_requires=['numpy',
                                   'scipy',
                                   'pyscipopt',
                                   'loguru',
                                   'ml-collections'],
                 extras_require={'test': ['pytest']},
                 python_requires='>=3.8')
