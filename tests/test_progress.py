from meditracker.utils.progress import should_show_progress, track


def test_explicit_setting_wins(monkeypatch):
    monkeypatch.setenv("MEDITRACKER_TQDM", "1")
    assert should_show_progress(False) is False
    assert should_show_progress(True) is True


def test_env_flag(monkeypatch):
    monkeypatch.setenv("MEDITRACKER_TQDM", "1")
    assert should_show_progress() is True
    monkeypatch.setenv("MEDITRACKER_TQDM", "0")
    assert should_show_progress() is False


def test_ci_disables_progress(monkeypatch):
    monkeypatch.delenv("MEDITRACKER_TQDM", raising=False)
    monkeypatch.setenv("CI", "true")
    assert should_show_progress() is False


def test_track_passthrough_when_disabled():
    items = [1, 2, 3]
    assert track(items, enabled=False) is items


def test_track_wraps_when_enabled(capsys):
    assert list(track([1, 2, 3], enabled=True)) == [1, 2, 3]
