"""Tests for the ETAS samplers and intensity functions."""

import math

import numpy as np
import pytest

from etascatgen.etas.process import ProcessParameters
from etascatgen.etas.kernel import (
    productivity,
    source_intensity,
    integrated_intensity,
    integrated_intensity_to_infinity,
    expected_offspring,
    next_background_occurrence,
    next_single_occurrence,
    draw_magnitude,
    conditional_intensity,
)


BETA = math.log(10.0)


@pytest.fixture
def params():
    return ProcessParameters.create(
        mu_0=1.0,
        min_magnitude=3.0,
        max_magnitude=8.0,
        beta=BETA,
        p=1.2,
        c=0.01,
        reference_magnitude=3.0,
        offspring_fraction=0.3,
    )


def magnitude_cdf(params, M):
    beta = params.beta
    dM = params.max_magnitude - params.min_magnitude
    return (
        (1.0 - np.exp(-beta * (M - params.min_magnitude)))
        / (1.0 - math.exp(-beta * dM))
    )


class TestBackgroundSampler:
    """Tests for next_background_occurrence."""

    def test_closed_form(self, params, close):
        """Test tl - ln(q) / mu0."""
        close(next_background_occurrence(params, 0.25, 5.0), 5.0 - math.log(0.25))

    def test_scales_with_rate(self, close):
        """Test waiting times shrink with the background rate."""
        fast = ProcessParameters.create(4.0, 3.0, 8.0, BETA, 1.2, 0.01, 3.0, 0.3)
        close(next_background_occurrence(fast, 0.5, 0.0), math.log(2.0) / 4.0)

    def test_after_lower_bound(self, params):
        """Test the next time lies after tl."""
        for q in (1e-12, 0.3, 0.999999):
            assert next_background_occurrence(params, q, 10.0) > 10.0


class TestMagnitudeSampler:
    """Tests for draw_magnitude."""

    @pytest.mark.parametrize("q", [0.01, 0.1, 0.5, 0.9, 0.999999])
    def test_inverts_cdf(self, params, close, q):
        """Test F(draw_magnitude(q)) == q."""
        M = draw_magnitude(params, q)
        close(magnitude_cdf(params, M), q, rtol=1e-8)

    def test_bounds(self, params):
        """Test draws stay within [Mmin, Mmax] at the extremes."""
        assert draw_magnitude(params, 2.0 ** -52) >= params.min_magnitude
        assert draw_magnitude(params, 1.0 - 2.0 ** -52) <= params.max_magnitude

    def test_median_gutenberg_richter(self, close):
        """Test the median for a wide range approaches Mmin + ln 2 / beta."""
        wide = ProcessParameters.create(1.0, 0.0, 50.0, BETA, 1.2, 0.01, 0.0, 0.3)
        close(draw_magnitude(wide, 0.5), math.log(2.0) / BETA)


class TestIntensities:
    """Tests for the Omori-Utsu intensities."""

    def test_productivity(self, params, close):
        """Test f(M) = exp(beta (M - Mr))."""
        close(productivity(params, 3.0), 1.0)
        close(productivity(params, 5.0), 100.0)

    def test_source_intensity_at_origin(self, params, close):
        """Test the rate right at the origin time."""
        expected = 100.0 * params.FK * (1.0 / params.c) ** params.p
        close(source_intensity(params, 2.0, 2.0, 5.0), expected)

    def test_source_intensity_before_origin(self, params):
        """Test the source is inactive before its origin."""
        assert source_intensity(params, 1.0, 2.0, 5.0) == 0.0

    def test_source_intensity_decays(self, params):
        """Test the Omori-Utsu decay."""
        rates = [source_intensity(params, t, 0.0, 4.0) for t in (0.1, 1.0, 10.0)]
        assert rates[0] > rates[1] > rates[2] > 0.0

    @pytest.mark.parametrize("t", [0.05, 1.0, 20.0])
    def test_integrated_intensity_derivative(self, params, close, t):
        """Test dΛ/dt equals the source intensity."""
        h = 1e-6 * t
        derivative = (
            integrated_intensity(params, 0.0, 4.0, 0.0, t + h)
            - integrated_intensity(params, 0.0, 4.0, 0.0, t - h)
        ) / (2.0 * h)
        close(derivative, source_intensity(params, t, 0.0, 4.0), rtol=1e-5)

    def test_integrated_intensity_limit(self, params, close):
        """Test Λ(tl, tr) approaches Λ_∞ for large tr."""
        tail = integrated_intensity_to_infinity(params, 0.0, 4.0, 1.0)
        window = integrated_intensity(params, 0.0, 4.0, 1.0, 1e30)
        close(window, tail, rtol=1e-4)

    def test_expected_offspring(self, params, close):
        """Test Λ_∞ from the origin scales with f(M)."""
        close(expected_offspring(params, 5.0), 100.0 * expected_offspring(params, 3.0))
        close(
            expected_offspring(params, 3.0),
            params.FK / (params.p - 1.0) * params.c ** (1.0 - params.p)
        )

    def test_conditional_intensity_empty_history(self, params):
        """Test the background rate without history."""
        rate = conditional_intensity(params, [0.5, 2.0], [], [])
        np.testing.assert_allclose(np.asarray(rate), [1.0, 1.0], rtol=1e-6)

    def test_conditional_intensity_sums_sources(self, params):
        """Test the total intensity sums the active sources."""
        times = [0.0, 1.0, 5.0]
        magnitudes = [5.0, 3.5, 6.0]
        t = [0.5, 2.0]
        rate = np.asarray(conditional_intensity(params, t, times, magnitudes))

        expected = [
            params.mu_0 + sum(
                source_intensity(params, tt, ti, Mi)
                for ti, Mi in zip(times, magnitudes)
            )
            for tt in t
        ]
        np.testing.assert_allclose(rate, expected, rtol=1e-5)


class TestOffspringSampler:
    """Tests for next_single_occurrence."""

    @pytest.mark.parametrize("q", [0.01, 0.5, 0.9])
    @pytest.mark.parametrize("tl", [0.0, 0.5, 3.0])
    def test_inverts_survival(self, params, close, q, tl):
        """Test Λ(tl, tnext) == -ln q for a productive source."""
        ti, Mi = 0.0, 6.0
        tnext = next_single_occurrence(params, q, ti, Mi, tl)
        assert tnext is not None
        assert tnext > tl
        close(integrated_intensity(params, ti, Mi, tl, tnext), -math.log(q), rtol=1e-7)

    def test_monotone_in_q(self, params):
        """Test smaller q gives later occurrences."""
        t_small_q = next_single_occurrence(params, 0.1, 0.0, 6.0, 0.0)
        t_large_q = next_single_occurrence(params, 0.9, 0.0, 6.0, 0.0)
        assert t_small_q > t_large_q

    def test_none_below_threshold(self, params):
        """Test q <= exp(-Λ_∞) yields no finite occurrence."""
        threshold = math.exp(-integrated_intensity_to_infinity(params, 0.0, 3.0, 0.0))
        assert next_single_occurrence(params, threshold * 0.999, 0.0, 3.0, 0.0) is None
        assert next_single_occurrence(params, threshold, 0.0, 3.0, 0.0) is None
        assert next_single_occurrence(params, threshold * 1.001, 0.0, 3.0, 0.0) is not None

    def test_low_productivity_source_retires(self, params):
        """Test a tiny event essentially never triggers."""
        Mi = params.reference_magnitude - 10.0
        assert next_single_occurrence(params, 1.0 - 1e-9, 0.0, Mi, 0.0) is None

    def test_zero_branching_never_triggers(self):
        """Test offspring_fraction = 0 retires every source."""
        params = ProcessParameters.create(1.0, 3.0, 8.0, BETA, 1.2, 0.01, 3.0, 0.0)
        for q in (1e-12, 0.5, 1.0 - 1e-12):
            assert next_single_occurrence(params, q, 0.0, 8.0, 0.0) is None

    def test_retirement_probability_grows_with_age(self, params):
        """Test older sources are more likely to produce nothing further."""
        young = integrated_intensity_to_infinity(params, 0.0, 5.0, 0.0)
        old = integrated_intensity_to_infinity(params, 0.0, 5.0, 100.0)
        assert old < young

    def test_reference_time_invariance(self, close):
        """Test Tref only normalises; the sampled time is unchanged."""
        p1 = ProcessParameters.create(1.0, 3.0, 8.0, BETA, 1.2, 0.01, 3.0, 0.3, 1.0)
        p2 = ProcessParameters.create(1.0, 3.0, 8.0, BETA, 1.2, 0.01, 3.0, 0.3, 60.0)
        close(
            next_single_occurrence(p1, 0.4, 1.0, 6.0, 2.0),
            next_single_occurrence(p2, 0.4, 1.0, 6.0, 2.0),
            rtol=1e-9,
        )

    def test_p_near_one_above_threshold(self):
        """Test occurrences beyond the float range retire the source."""
        params = ProcessParameters.create(1.0, 3.0, 8.0, BETA, 1.01, 0.01, 3.0, 0.3)
        threshold = math.exp(-integrated_intensity_to_infinity(params, 0.0, 3.0, 0.0))
        for factor in (1.0 + 1e-12, 1.0 + 1e-5, 1.0 + 1e-3):
            tnext = next_single_occurrence(params, threshold * factor, 0.0, 3.0, 0.0)
            assert tnext is None or (math.isfinite(tnext) and tnext >= 0.0)

    @pytest.mark.parametrize("Mi", [3.0, 5.5, 8.0])
    def test_p_near_one_never_fails(self, Mi):
        """Test the sampler returns for variates across (0, 1) when p is close to 1."""
        params = ProcessParameters.create(1.0, 3.0, 8.0, BETA, 1.01, 0.01, 3.0, 0.3)
        for q in np.linspace(1e-6, 1.0 - 1e-6, 2001):
            tnext = next_single_occurrence(params, float(q), 0.0, Mi, 2.0)
            assert tnext is None or (math.isfinite(tnext) and tnext >= 2.0)
