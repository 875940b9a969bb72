import argparse

import pytest

import main
from main import normalize_path_input, is_confirmed

ANSWERS = ['y', 'yes', 'д', 'да']


def answer_with(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr('builtins.input', lambda message="": next(replies))


@pytest.mark.parametrize("raw, expected", [
    ("/music", "/music"),
    ("  /music  ", "/music"),
    ('"/my music"', "/my music"),
    ('  "/my music" ', "/my music"),
    ('"', '"'),
    ("", ""),
    (None, ""),
])
def test_normalize_path_input(raw, expected):
    assert normalize_path_input(raw) == expected


@pytest.mark.parametrize("answer", ["y", "Y", "yes", "YES", " yes ", "д", "Д", "да", "ДА"])
def test_affirmative_answers(answer):
    assert is_confirmed(answer, ANSWERS)


@pytest.mark.parametrize("answer", ["", "n", "no", "нет", "yess", None])
def test_other_answers_abort(answer):
    assert not is_confirmed(answer, ANSWERS)


def test_sorts_after_confirmation(tmp_path, make_file, monkeypatch):
    make_file("Metallica - Master of Puppets.mp3")
    answer_with(monkeypatch, "y")

    assert main.main([str(tmp_path)]) == 0
    assert (tmp_path / "Metallica" / "Metallica - Master of Puppets.mp3").exists()


def test_declined_confirmation_touches_nothing(tmp_path, make_file, monkeypatch):
    song = make_file("Metallica - Master of Puppets.mp3")
    answer_with(monkeypatch, "n")

    assert main.main([str(tmp_path)]) == 1
    assert song.exists()
    assert not (tmp_path / "Metallica").exists()


def test_path_is_prompted_for(tmp_path, make_file, monkeypatch):
    make_file("Queen - Song.mp3")
    answer_with(monkeypatch, f'"{tmp_path}"', "да")

    assert main.main([]) == 0
    assert (tmp_path / "Queen" / "Queen - Song.mp3").exists()


def test_yes_flag_and_dry_run(tmp_path, make_file, capsys):
    song = make_file("Queen - Song.mp3")

    assert main.main([str(tmp_path), "--yes", "--dry-run"]) == 0
    assert song.exists()
    assert "would be moved: 1" in capsys.readouterr().out


def test_empty_path_is_an_error(monkeypatch):
    answer_with(monkeypatch, "   ")
    assert main.main([]) == 1


def test_missing_directory_is_an_error(tmp_path, capsys):
    assert main.main([str(tmp_path / "missing"), "--yes"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_bad_config_is_an_error(tmp_path, capsys):
    config = tmp_path / "config.yaml"
    config.write_text("logging:\n  level: LOUD\n", encoding='utf-8')

    assert main.main([str(tmp_path), "--yes", "--config", str(config)]) == 1
    assert "logging.level" in capsys.readouterr().err


def test_print_config(capsys):
    assert main.main(["--print-config"]) == 0
    assert "music_extensions" in capsys.readouterr().out


@pytest.mark.parametrize("value", ["0", "-1", "ten"])
def test_limit_must_be_a_positive_number(tmp_path, value):
    with pytest.raises(SystemExit) as excinfo:
        main.main([str(tmp_path), "--yes", "--limit", value])
    assert excinfo.value.code == 2


def test_positive_int():
    assert main.positive_int("3") == 3
    with pytest.raises(argparse.ArgumentTypeError):
        main.positive_int("0")
