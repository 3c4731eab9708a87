import dataclasses

import numpy as np
import pytest
from scipy.stats import norm

from oppchan_sim.core import (CalibrateFrom, Explicit, build_channels, conversion_from,
                              cortical_responses, evaluate, gnorm_pdf, grid_index,
                              location_indices, predict_maas, tuning_curve, tuning_gradient)
from oppchan_sim.errors import (CalibrationLookupError, ConfigurationError,
                                InvalidParameter, UndefinedResult)
from oppchan_sim.params import DEFAULT_AZIMUTHS, DEFAULT_LOCATIONS, make_group

X = DEFAULT_AZIMUTHS


# ------------------------------------------------------------ channels
@pytest.mark.parametrize("loc,wid,shp,amp", [(-90, 82, 2.6, 1.0),
                                             (90, 87, 2.2, 0.7299),
                                             (0, 30, 1.0, 0.5),
                                             (45, 73, 3.6, 0.4441)])
def test_tuning_curve_spans_zero_to_amp(loc, wid, shp, amp):
    tun = tuning_curve(X, loc, wid, shp, amp)
    assert tun.shape == X.shape
    assert tun.min() == pytest.approx(0.0, abs=1e-12)
    assert tun.max() == pytest.approx(amp)
    assert X[np.argmax(tun)] == loc


def test_shape_two_is_normal_density():
    np.testing.assert_allclose(gnorm_pdf(X, 10, 25, 2), norm.pdf(X, 10, 25), rtol=1e-10)


def test_gnorm_pdf_formula():
    from scipy.special import gamma
    s = 40 * np.sqrt(2)
    expected = 3.0 / (2 * s * gamma(1 / 3.0)) * np.exp(-(np.abs(X + 20) / s) ** 3.0)
    np.testing.assert_allclose(gnorm_pdf(X, -20, 40, 3.0), expected, rtol=1e-10)


@pytest.mark.parametrize("wid,shp", [(82, 0), (82, -1.5), (0, 2.6), (-5, 2.6)])
def test_non_positive_width_or_shape_rejected(wid, shp):
    with pytest.raises(InvalidParameter):
        gnorm_pdf(X, 0, wid, shp)


def test_gradient_boundary_and_interior():
    grd = tuning_gradient([0.0, 1.0, 3.0, 6.0])
    np.testing.assert_allclose(grd, [1.0, 1.5, 2.5, 3.0])


def test_gradient_matches_definition_on_channel(young):
    tun = young.chans[0].tun
    grd = young.chans[0].grd
    d = np.abs(np.diff(tun))
    assert grd.shape == tun.shape
    assert grd[0] == pytest.approx(d[0])
    assert grd[-1] == pytest.approx(d[-1])
    np.testing.assert_allclose(grd[1:-1], (d[:-1] + d[1:]) / 2)


def test_summed_gradient(young):
    np.testing.assert_allclose(young.pred.grads, young.chans[0].grd + young.chans[1].grd)


def test_channel_outside_grid_rejected():
    with pytest.raises(InvalidParameter):
        build_channels([{"loc": 120, "amp": 1, "wid": 82, "shp": 2.6}], X)


def test_non_positive_amplitude_rejected():
    with pytest.raises(InvalidParameter):
        tuning_curve(X, -90, 82, 2.6, amp=0.0)


def test_flat_tuning_curve_rejected():
    # a 0.001° wide peak between two half-degree samples underflows to 0 everywhere
    with pytest.raises(InvalidParameter):
        tuning_curve(X + 0.5, 0, 0.001, 2, amp=1.0)


def test_bad_grid_rejected():
    with pytest.raises(ConfigurationError):
        build_channels(make_group("young")["chans"], np.arange(-90, 91, 2))


# ------------------------------------------------------------ grid lookups
def test_grid_index_exact_only():
    assert grid_index(X, 0) == 90
    assert grid_index(X, -90.0) == 0
    with pytest.raises(CalibrationLookupError):
        grid_index(X, 0.5)
    with pytest.raises(InvalidParameter):
        grid_index(X, 91)
    with pytest.raises(LookupError):
        grid_index(X, -91)


def test_location_not_on_grid_rejected():
    assert location_indices(X, DEFAULT_LOCATIONS) == (30, 60, 90, 120, 150)
    with pytest.raises(ConfigurationError):
        location_indices(X, (-60, 15.5))


# ------------------------------------------------------------ cortical units
def test_diagonal_is_noise(young):
    for u in young.ac:
        assert (np.diag(u.resp) == u.noise).all()


def test_compressed_drive_in_unit_interval(young):
    for u in young.ac:
        pre_scale = (u.resp - u.noise) / u.scale
        assert (pre_scale >= -1e-12).all()
        assert (pre_scale < 1).all()


def test_uncompressed_drive_is_rectified_difference(young_params):
    chans, _ = build_channels(young_params["chans"])
    ac = [{"label": "raw", "comp": 0, "weights": [1.0, 1.0], "scale": 1.0, "noise": 0.0}]
    (unit,) = cortical_responses(chans, ac)
    norm_tun = [c.tun / c.tun.max() for c in chans]
    idx = location_indices(X, DEFAULT_LOCATIONS)
    for i, pre in enumerate(idx):
        for j, post in enumerate(idx):
            expected = sum(max(t[post] - t[pre], 0.0) for t in norm_tun)
            assert unit.resp[i, j] == pytest.approx(expected)
    assert (unit.resp >= 0).all()


def test_decrease_in_activation_gives_no_drive(young_params):
    chans, _ = build_channels(young_params["chans"])
    ac = [{"label": "left only", "comp": 3, "weights": [1.0, 0.0],
           "scale": 10.0, "noise": 2.0}]
    (unit,) = cortical_responses(chans, ac)
    # moving away from the left channel's peak (-60 -> 60)
    assert unit.resp[0, 4] == 2.0
    assert unit.resp[4, 0] > 2.0


def test_amplitude_does_not_change_responses(young_params):
    scaled = make_group("young")
    for ch in scaled["chans"]:
        ch["amp"] = 0.3
    a = evaluate(young_params)
    b = evaluate(scaled)
    for ua, ub in zip(a.ac, b.ac):
        np.testing.assert_allclose(ua.resp, ub.resp)
    assert b.chans[0].tun.max() == pytest.approx(0.3)


def test_negative_weight_rejected(young_params):
    young_params["ac"][0]["weights"] = [-0.5, 1.5]
    with pytest.raises(InvalidParameter):
        evaluate(young_params)


def test_weights_length_mismatch(young_params):
    young_params["ac"][0]["weights"] = [1.0]
    with pytest.raises(ConfigurationError):
        evaluate(young_params)


def test_negative_compression_rejected(young_params):
    young_params["ac"][1]["comp"] = -1
    with pytest.raises(InvalidParameter):
        evaluate(young_params)


# ------------------------------------------------------------ predictions
def test_maas_are_k_over_grads(young):
    np.testing.assert_allclose(young.pred.maas, young.pred.k / young.pred.grads)
    np.testing.assert_allclose(young.pred.igrads, 1 / young.pred.grads)
    assert young.pred.conversion == Explicit(0.091)


@pytest.mark.parametrize("k", [None, float("nan")])
def test_calibration_round_trip(young_params, k):
    young_params["pred"]["k"] = k
    young_params["pred"]["maak"] = [45, 8.3496]
    res = evaluate(young_params)
    assert res.pred.conversion == CalibrateFrom(45.0, 8.3496)
    assert res.pred.maa_at(45) == pytest.approx(8.3496)


def test_conversion_needs_maak_when_k_unset():
    with pytest.raises(ConfigurationError):
        conversion_from({"k": None})


def test_calibration_azimuth_between_samples(young_params):
    young_params["pred"]["k"] = None
    young_params["pred"]["maak"] = [0.5, 5.0]
    with pytest.raises(LookupError):
        evaluate(young_params)


def test_calibration_azimuth_outside_grid(young_params):
    young_params["pred"]["k"] = None
    young_params["pred"]["maak"] = [135, 5.0]
    with pytest.raises(InvalidParameter):
        evaluate(young_params)
    with pytest.raises(LookupError):
        evaluate(young_params)


def _plateau_params(k=1.0):
    # shape 50 is flat at the peak and underflows to 0 in the tails
    return {"chans": [{"loc": 0, "amp": 1, "wid": 10, "shp": 50}],
            "ac": [{"label": "AC", "comp": 3, "weights": [1.0], "scale": 1.0, "noise": 0.0}],
            "pred": {"data": [], "k": k, "maak": [0, 5.0]}}


def test_zero_gradient_strict():
    with pytest.raises(UndefinedResult) as err:
        evaluate(_plateau_params())
    assert 0.0 in err.value.azimuths
    assert -90.0 in err.value.azimuths


def test_zero_gradient_lenient():
    res = evaluate(_plateau_params(), strict=False)
    assert np.isinf(res.pred.maa_at(0))
    assert np.isinf(res.pred.maas[0])
    assert np.isfinite(res.pred.maa_at(15))


def test_zero_gradient_at_calibration_azimuth():
    with pytest.raises(UndefinedResult):
        evaluate(_plateau_params(k=None), strict=False)


def test_predict_maas_direct():
    igrads, k, maas = predict_maas([0.5, 0.25, 0.0], [0, 1, 2], Explicit(2.0))
    assert k == 2.0
    np.testing.assert_allclose(maas[:2], [4.0, 8.0])
    assert np.isinf(igrads[2]) and np.isinf(maas[2])


# ------------------------------------------------------------ end to end
def test_young_end_to_end(young):
    x = list(young.azimuths)
    assert young.chans[0].loc == -90
    assert young.chans[1].tun[x.index(90)] == pytest.approx(1.0)
    assert young.chans[1].tun[x.index(-90)] == pytest.approx(0.0, abs=1e-12)
    assert young.chans[0].tun[x.index(-90)] == pytest.approx(1.0)
    assert young.ac[0].resp[2][2] == young.ac[0].noise == 3.2907
    assert young.ac[0].resp.shape == (5, 5)
    ref, maa, ci = young.pred.data[0]
    assert ref == 0
    assert abs(young.pred.maa_at(0) - maa) < ci
    # acuity is finest straight ahead
    assert young.pred.maa_at(0) < young.pred.maa_at(45) < young.pred.maa_at(75)


def test_evaluate_defaults_and_missing_groups():
    assert evaluate().ac[1].noise == 3.3582
    with pytest.raises(ConfigurationError):
        evaluate({"chans": [], "ac": []})


def test_results_are_immutable(young):
    with pytest.raises(ValueError):
        young.chans[0].tun[0] = 5.0
    with pytest.raises(ValueError):
        young.ac[0].resp[0, 0] = 5.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        young.pred.k = 1.0
