# tests/test_sweep.py
import json
import math
import warnings

import numpy as np
import pytest

from awgn_gmi.constellation import InvalidConstellationSize, qam_constellation, sigma_from_snr_db
from awgn_gmi.evaluator import qam_eval_mi, qam_eval_gmi
from awgn_gmi.sweep import DegenerationWarning, GmiSweepResult, evaluate, sweep_mi_gmi


def test_outputs_are_index_aligned_with_unsorted_snrs():
    """Slot i holds SNR entry i whatever order the workers finish in."""
    C = qam_constellation(16)
    snrs = [12.0, -4.0, 20.0, 0.0, 6.0, 3.0, -10.0]
    mi, gmi = evaluate(C, snrs, workers=4)
    assert mi.shape == gmi.shape == (len(snrs),)
    for i, v in enumerate(snrs):
        s = sigma_from_snr_db(1.0, v)
        assert mi[i] == pytest.approx(qam_eval_mi(C, s), abs=1e-13)
        assert gmi[i] == pytest.approx(qam_eval_gmi(C, s), abs=1e-13)


def test_serial_and_threaded_agree():
    C = qam_constellation(16, labeling="binary")
    snrs = np.linspace(-5, 15, 6)
    mi1, gmi1 = evaluate(C, snrs, workers=1)
    mi4, gmi4 = evaluate(C, snrs, workers=4, executor="thread")
    np.testing.assert_array_equal(mi1, mi4)
    np.testing.assert_array_equal(gmi1, gmi4)


def test_process_executor_agrees_with_serial():
    C = qam_constellation(4)
    snrs = [8.0, 0.0, 4.0]
    mi1, gmi1 = evaluate(C, snrs, workers=1)
    mip, gmip = evaluate(C, snrs, workers=2, executor="process")
    np.testing.assert_allclose(mip, mi1, atol=1e-14)
    np.testing.assert_allclose(gmip, gmi1, atol=1e-14)


def test_empty_snr_list():
    mi, gmi = evaluate(qam_constellation(4), [])
    assert mi.shape == (0,) and gmi.shape == (0,)
    res = sweep_mi_gmi(qam_constellation(4), [])
    assert res.success and res.points == []


@pytest.mark.parametrize("C,M", [
    (np.array([1, -1, 1j]), None),                  # not a power of two
    (np.array([1 + 0j]), None),                     # M < 2
    (qam_constellation(16), 8),                     # explicit M mismatch
    (qam_constellation(16).reshape(4, 4), None),    # M not inferable from a matrix
    (np.array([1, np.nan, -1, 1j]), None),          # non-finite symbol
])
def test_bad_constellation_fails_before_any_work(C, M):
    with pytest.raises(InvalidConstellationSize):
        evaluate(C, [0.0, 10.0], M=M)


def test_infinite_snrs_are_clamped_to_limits():
    C = qam_constellation(16)
    res = sweep_mi_gmi(C, [math.inf, 5.0, -math.inf], workers=2)
    assert res.status_curve == ["noiseless", "ok", "noise_limited"]
    assert res.mi_curve[0] == res.gmi_curve[0] == 4.0
    assert res.mi_curve[2] == res.gmi_curve[2] == 0.0
    assert res.sigma_curve[0] == 0.0 and math.isinf(res.sigma_curve[2])
    assert res.success


def test_failed_entry_is_flagged_and_isolated():
    C = qam_constellation(4)
    snrs = [0.0, math.nan, 10.0]
    with pytest.warns(DegenerationWarning):
        res = sweep_mi_gmi(C, snrs, workers=3)
    assert res.status_curve == ["ok", "failed", "ok"]
    assert res.failed == [1]
    assert not res.success
    assert math.isnan(res.mi_curve[1]) and math.isnan(res.gmi_curve[1])
    assert res.points[1].message
    # siblings unaffected
    mi_ok, _ = evaluate(C, [0.0, 10.0])
    assert res.mi_curve[0] == pytest.approx(mi_ok[0])
    assert res.mi_curve[2] == pytest.approx(mi_ok[1])


def test_zero_energy_constellation_flags_every_entry():
    with pytest.warns(DegenerationWarning):
        res = sweep_mi_gmi(np.zeros(4, dtype=complex), [0.0, 10.0], workers=1)
    assert res.status_curve == ["failed", "failed"]
    assert all("symbol energy" in p.message for p in res.points)


def test_clean_sweep_emits_no_warning():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DegenerationWarning)
        res = sweep_mi_gmi(qam_constellation(4), [0.0, 5.0], workers=1)
    assert res.success


def test_result_container_and_json(tmp_path):
    C = qam_constellation(16)
    res = sweep_mi_gmi(C, [0.0, 10.0], gh_order=12, workers=1, progress=True)
    assert isinstance(res, GmiSweepResult)
    assert res.meta["M"] == 16 and res.meta["bits_per_symbol"] == 4
    assert res.meta["gh_order"] == 12 and res.meta["Es"] == pytest.approx(1.0)
    np.testing.assert_allclose(res.gap_curve, np.array(res.mi_curve) - np.array(res.gmi_curve))

    out = tmp_path / "sub" / "mi_gmi.json"
    res.to_json_file(out)
    data = json.loads(out.read_text())
    assert data["snr_db"] == [0.0, 10.0]
    assert data["mi"] == res.mi_curve and data["gmi"] == res.gmi_curve
    assert [p["status"] for p in data["points"]] == ["ok", "ok"]


def test_gh_order_is_configurable():
    C = qam_constellation(16)
    mi10, _ = evaluate(C, [5.0], gh_order=10)
    mi30, _ = evaluate(C, [5.0], gh_order=30)
    assert mi10[0] != mi30[0]
    assert mi10[0] == pytest.approx(mi30[0], abs=1e-4)


def test_bad_executor_settings():
    C = qam_constellation(4)
    with pytest.raises(ValueError):
        sweep_mi_gmi(C, [0.0], executor="gpu")
    with pytest.raises(ValueError):
        sweep_mi_gmi(C, [0.0], workers=0)
