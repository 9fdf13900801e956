import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from core.process import IoEvent, ProcessSpec  # noqa: E402


def spec(arrival, burst, *io):
    """ProcessSpec shorthand: spec(0, 5, (2, 3)) -> I/O of 3 units after 2 units of CPU"""
    return ProcessSpec(arrival, burst, [IoEvent(offset, duration) for offset, duration in io])


@pytest.fixture
def make_spec():
    return spec
