import matplotlib
matplotlib.use("Agg")

import pytest
from oppchan_sim.core   import run_model
from oppchan_sim.params import make_group


@pytest.fixture
def young():
    return run_model("young")


@pytest.fixture
def young_params():
    return make_group("young")
