from pathlib import Path

import pandas as pd

from meditracker.lib.io_guards import _compute_backup_path, write_csv, write_text


def test_backup_path_keeps_suffix():
    assert _compute_backup_path(Path("data/meditracker.json")).name == "meditracker_prev.json"
    assert _compute_backup_path(Path("out/medications.csv")).name == "medications_prev.csv"


def test_write_text_creates_parent_and_backup(tmp_path):
    target = tmp_path / "nested" / "save.json"
    write_text(target, "first")
    write_text(target, "second")

    assert target.read_text(encoding="utf-8") == "second"
    assert (target.parent / "save_prev.json").read_text(encoding="utf-8") == "first"
    # no temp files left behind
    assert sorted(p.name for p in target.parent.iterdir()) == ["save.json", "save_prev.json"]


def test_write_csv_backs_up_previous_export(tmp_path):
    target = tmp_path / "out.csv"
    write_csv(pd.DataFrame({"name": ["A"]}), target)
    write_csv(pd.DataFrame({"name": ["B"]}), target)

    assert list(pd.read_csv(target)["name"]) == ["B"]
    assert list(pd.read_csv(tmp_path / "out_prev.csv")["name"]) == ["A"]


def test_write_csv_dry_run(tmp_path, capsys):
    target = tmp_path / "out.csv"
    write_csv(pd.DataFrame({"name": ["A"]}), target, dry_run=True)

    assert not target.exists()
    assert "DRY RUN" in capsys.readouterr().out
