import json

from app.modules.study.cli import main


def test_generate_offline_prints_cards(capsys):
    code = main(
        ["generate", "--offline", "-s", "science", "-d", "hard", "-n", "6", "--class-level", "12"]
    )
    assert code == 0
    cards = json.loads(capsys.readouterr().out)
    assert len(cards) == 6
    assert {c["difficulty"] for c in cards} == {"hard"}
    assert {c["class_level"] for c in cards} == {"12"}
