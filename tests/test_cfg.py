# tests/test_cfg.py
import numpy as np
import pytest
import yaml

from awgn_gmi.cfg import (
    DEFAULT_CFG,
    lookup,
    load_cfg,
    merge_cfg,
    snr_list_from_cfg,
    constellation_from_cfg,
    eval_kwargs_from_cfg,
)
from awgn_gmi.constellation import qam_constellation, psk_constellation, symbol_energy


def write_yaml(tmp_path, obj, name="cfg.yaml"):
    p = tmp_path / name
    p.write_text(yaml.safe_dump(obj))
    return p


def test_load_cfg_merges_over_defaults(tmp_path):
    p = write_yaml(tmp_path, {"constellation": {"M": 64}, "eval": {"workers": 2}})
    cfg = load_cfg(p)
    assert cfg["constellation"]["M"] == 64
    assert cfg["constellation"]["labeling"] == "gray"          # default kept
    assert cfg["eval"]["workers"] == 2
    assert cfg["eval"]["gh_order"] == DEFAULT_CFG["eval"]["gh_order"]
    # defaults are not mutated
    assert DEFAULT_CFG["constellation"]["M"] == 16


def test_empty_yaml_gives_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_cfg(p) == DEFAULT_CFG


def test_non_mapping_yaml_rejected(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_cfg(p)


def test_lookup_and_merge():
    cfg = merge_cfg({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}})
    assert cfg == {"a": {"b": 1, "c": 3}}
    assert lookup(cfg, "a.c") == 3
    assert lookup(cfg, "a.x.y", default="d") == "d"


class TestSnrList:

    def test_explicit_list_wins(self):
        cfg = merge_cfg(DEFAULT_CFG, {"channel": {"snr_db_list": [3, -1, 7],
                                                  "snr_db_range": {"start": 0, "stop": 1, "step": 1}}})
        assert snr_list_from_cfg(cfg) == [3.0, -1.0, 7.0]

    def test_range_is_stop_inclusive(self):
        cfg = merge_cfg(DEFAULT_CFG, {"channel": {"snr_db_range": {"start": -2, "stop": 4, "step": 2}}})
        assert snr_list_from_cfg(cfg) == [-2.0, 0.0, 2.0, 4.0]

    def test_missing(self):
        with pytest.raises(ValueError):
            snr_list_from_cfg(DEFAULT_CFG)

    @pytest.mark.parametrize("rng", [{"start": 0, "stop": 4, "step": 0}, {"start": 0, "stop": 4}])
    def test_bad_range(self, rng):
        with pytest.raises(ValueError):
            snr_list_from_cfg(merge_cfg(DEFAULT_CFG, {"channel": {"snr_db_range": rng}}))


class TestConstellationFromCfg:

    def test_qam(self):
        cfg = merge_cfg(DEFAULT_CFG, {"constellation": {"M": 64, "labeling": "binary"}})
        np.testing.assert_allclose(constellation_from_cfg(cfg), qam_constellation(64, labeling="binary"))

    def test_psk(self):
        cfg = merge_cfg(DEFAULT_CFG, {"constellation": {"type": "psk", "M": 8, "phase0": 0.3}})
        np.testing.assert_allclose(constellation_from_cfg(cfg), psk_constellation(8, phase0=0.3))

    def test_custom_points_normalized(self):
        pts = [[1, 1], [-1, 1], [-1, -1], [1, -1]]
        cfg = merge_cfg(DEFAULT_CFG, {"constellation": {"type": "custom", "points": pts}})
        C = constellation_from_cfg(cfg)
        assert C.size == 4
        assert symbol_energy(C) == pytest.approx(1.0)
        assert C[1] == pytest.approx((-1 + 1j) / np.sqrt(2))

    def test_custom_points_raw(self):
        cfg = merge_cfg(DEFAULT_CFG, {"constellation": {"type": "custom", "normalize": False,
                                                        "points": [[3, 0], [-3, 0]]}})
        np.testing.assert_allclose(constellation_from_cfg(cfg), [3.0, -3.0])

    @pytest.mark.parametrize("c", [
        {"type": "custom", "points": None},
        {"type": "custom", "points": [1, 2, 3]},
        {"type": "apsk"},
    ])
    def test_invalid(self, c):
        with pytest.raises(ValueError):
            constellation_from_cfg(merge_cfg(DEFAULT_CFG, {"constellation": c}))


def test_eval_kwargs():
    cfg = merge_cfg(DEFAULT_CFG, {"eval": {"gh_order": 20, "workers": "3", "executor": "Process"}})
    kw = eval_kwargs_from_cfg(cfg)
    assert kw == {"gh_order": 20, "block_size": 64, "workers": 3, "executor": "process", "progress": False}
    assert eval_kwargs_from_cfg(DEFAULT_CFG)["workers"] is None


def test_shipped_example_config_loads():
    from pathlib import Path
    path = Path(__file__).resolve().parent.parent / "configs" / "qam16_gray.yaml"
    cfg = load_cfg(path)
    assert constellation_from_cfg(cfg).size == 16
    snrs = snr_list_from_cfg(cfg)
    assert snrs[0] == -5.0 and snrs[-1] == 25.0 and len(snrs) == 31
