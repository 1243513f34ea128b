from unittest.mock import patch

import pytest

from klondike import Game, PileRef, main
from klondike.game import create_parser
from klondike.options import DEFAULT_OPTIONS

from conftest import c, make_board


@pytest.mark.parametrize(
    "inp, expected",
    [
        ("d", ("draw", None)),
        ("UNDO", ("undo", None)),
        ("h", ("hint", None)),
        ("collect", ("collect", None)),
        ("new", ("new", None)),
        ("q", ("quit", None)),
        ("", ("error", "Empty input")),
        ("jump", ("error", "Unknown command 'jump'")),
        ("x1 t2", ("error", "Unknown pile 'x1'")),
        ("t1 t8", ("error", "Unknown pile 't8'")),
        ("t1 t2 zero", ("error", "Invalid count")),
        ("t1 t2 0", ("error", "Invalid count")),
        ("t1 t2 3 4", ("error", "Too many arguments")),
    ],
)
def test_parse_commands(inp, expected):
    assert Game(mode='random').parse_input(inp) == expected


def test_parse_moves():
    game = Game(mode='random')
    assert game.parse_input("w f♥") == ('move', (PileRef.waste(), PileRef.foundation('hearts'), None))
    assert game.parse_input("t7 fs") == ('move', (PileRef.tableau(6), PileRef.foundation('spades'), None))
    assert game.parse_input("t2 t3 2") == ('move', (PileRef.tableau(1), PileRef.tableau(2), 2))


def test_resolve_count_takes_longest_run(game):
    game.load_board(make_board(tableau=[[c('3c', False), c('10s'), c('9h'), c('8s')], [c('Jd')], [c('10c')]]))
    assert game.resolve_count(PileRef.tableau(0), PileRef.tableau(1)) == 3
    assert game.resolve_count(PileRef.tableau(0), PileRef.tableau(2)) == 2
    assert game.resolve_count(PileRef.waste(), PileRef.tableau(2)) == 1


def test_handle_move_command(game, capsys):
    game.load_board(make_board(tableau=[[c('8s')], [c('7h')]]))
    assert game.handle_command(*game.parse_input("t2 t1"))
    assert game.board.tableau[0][-1].id == 'hearts-7'
    assert game.handle_command(*game.parse_input("t1 t2"))
    assert 'Invalid move' in capsys.readouterr().out
    assert game.handle_command('undo', None)
    assert game.board.tableau[1][-1].id == 'hearts-7'
    assert game.handle_command('quit', None) is False


def test_render_shows_hidden_cards(game):
    text = game.render()
    assert 'Stock: [24]' in text
    assert 't2: ## 3♥' in text


def test_play_loop_quits(monkeypatch, capsys):
    inputs = iter(['d', 'hint', 'q'])
    monkeypatch.setattr('builtins.input', lambda _: next(inputs))
    game = Game(mode='random', auto_collect=False)
    game.play(seed=4)
    assert game.board.moves == 1
    assert 'Hint:' in capsys.readouterr().out


def test_play_stops_on_eof(monkeypatch):
    def no_input(_):
        raise EOFError

    monkeypatch.setattr('builtins.input', no_input)
    Game(mode='random').play(seed=1)


def test_cli_flags(monkeypatch):
    captured = {}

    def fake_play(self, seed=None):
        captured['mode'] = self.mode
        captured['auto_collect'] = self.auto_collect
        captured['attempts'] = self.max_deal_attempts
        captured['sensitivity'] = self.sensitivity
        captured['seed'] = seed

    monkeypatch.setattr('klondike.game.Game.play', fake_play)
    main(['--mode', 'random', '--seed', '9', '--max-attempts', '12', '--no-auto-collect',
          '--sensitivity', '250'])
    assert captured == {
        'mode': 'random',
        'auto_collect': False,
        'attempts': 12,
        'sensitivity': 250.0,
        'seed': 9,
    }


def test_cli_defaults_come_from_options(monkeypatch):
    captured = {}

    def fake_play(self, seed=None):
        captured['mode'] = self.mode
        captured['auto_collect'] = self.auto_collect
        captured['seed'] = seed

    monkeypatch.setattr('klondike.game.Game.play', fake_play)
    opts = dict(DEFAULT_OPTIONS, deal_mode='random')
    with patch('klondike.game.load_options', return_value=opts):
        main([])
    assert captured == {'mode': 'random', 'auto_collect': True, 'seed': None}


def test_parser_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        create_parser(dict(DEFAULT_OPTIONS)).parse_args(['--mode', 'easy'])
