import json

from klondike.options import DEFAULT_OPTIONS, load_options, save_options


def test_defaults_when_missing(tmp_path):
    assert load_options(tmp_path / "missing.json") == DEFAULT_OPTIONS


def test_save_and_load(tmp_path):
    path = tmp_path / "opts" / "options.json"
    save_options({"deal_mode": "random", "auto_collect": False, "max_deal_attempts": 20}, path)
    assert path.exists()
    opts = load_options(path)
    assert opts["deal_mode"] == "random"
    assert opts["auto_collect"] is False
    assert opts["max_deal_attempts"] == 20
    assert opts["drop_sensitivity"] == DEFAULT_OPTIONS["drop_sensitivity"]


def test_bad_values_fall_back(tmp_path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"deal_mode": "easy", "max_deal_attempts": "lots"}), encoding="utf-8")
    opts = load_options(path)
    assert opts["deal_mode"] == DEFAULT_OPTIONS["deal_mode"]
    assert opts["max_deal_attempts"] == DEFAULT_OPTIONS["max_deal_attempts"]


def test_corrupt_file_warns(tmp_path, monkeypatch):
    import klondike.options as options

    path = tmp_path / "options.json"
    path.write_text("{not json", encoding="utf-8")
    warnings = []
    monkeypatch.setattr(options.logger, "warning", lambda *a: warnings.append(a))
    assert load_options(path) == DEFAULT_OPTIONS
    assert warnings and warnings[0][0] == "Failed to load options: %s"


def test_default_location_skipped_under_pytest():
    save_options({"deal_mode": "random"})
    assert load_options() == DEFAULT_OPTIONS
