"""Pytest configuration and shared test utilities."""

import pytest
import numpy as np
from typing import Union


# Default tolerances for float comparisons
RTOL_DEFAULT = 1e-9  # Relative tolerance
ATOL_DEFAULT = 1e-12  # Absolute tolerance


def assert_close(
    actual: float,
    expected: float,
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two values are close within tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        rtol: Relative tolerance (default: 1e-9)
        atol: Absolute tolerance (default: 1e-12)
        msg: Optional message for assertion failure

    Example:
        >>> assert_close(get_branching_ratio(params), 0.3)
    """
    actual_val = float(actual)
    expected_val = float(expected)

    # Use pytest.approx for nice error messages
    assert actual_val == pytest.approx(expected_val, rel=rtol, abs=atol), (
        f"{msg}\nExpected: {expected_val}\nActual: {actual_val}\n"
        f"Diff: {abs(actual_val - expected_val)}"
    )


def assert_array_close(
    actual: Union[np.ndarray, list],
    expected: Union[np.ndarray, list],
    rtol: float = RTOL_DEFAULT,
    atol: float = ATOL_DEFAULT,
    msg: str = ""
):
    """Assert that two arrays are close within tolerance.

    Uses numpy.testing.assert_allclose for detailed error messages.
    """
    np.testing.assert_allclose(
        np.asarray(actual), np.asarray(expected),
        rtol=rtol, atol=atol,
        err_msg=msg
    )


@pytest.fixture
def close():
    """Fixture providing assert_close function.

    Usage:
        def test_something(close):
            close(actual, expected)
    """
    return assert_close


@pytest.fixture
def array_close():
    """Fixture providing assert_array_close function.

    Usage:
        def test_something(array_close):
            array_close(actual_array, expected_array)
    """
    return assert_array_close
