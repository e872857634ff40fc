from types import SimpleNamespace
from unittest import mock

import pytest

from amadeus import appinfo
from amadeus.appinfo import app_complete_name, create_dirs, home_dir


def test_app_complete_name():
    assert app_complete_name() == "Amadeus - music for you"


def test_app_complete_name_parts():
    name = app_complete_name()
    assert name.startswith(appinfo.PROGRAM)
    assert name.endswith(appinfo.SUBNAME)


def test_home_dir_uses_password_database():
    entry = SimpleNamespace(pw_dir="/home/someone")
    with mock.patch.object(appinfo.pwd, "getpwuid", return_value=entry):
        assert home_dir() == "/home/someone"


def test_home_dir_unknown_user():
    with mock.patch.object(appinfo.pwd, "getpwuid", side_effect=KeyError):
        assert home_dir() == ""


def test_create_dirs_makes_nested(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    result = create_dirs(target)
    assert result == target
    assert target.is_dir()


def test_create_dirs_existing_is_fine(tmp_path):
    target = tmp_path / "exists"
    target.mkdir()
    assert create_dirs(str(target)) == target
    assert target.is_dir()


def test_create_dirs_under_file_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(OSError):
        create_dirs(blocker / "child")