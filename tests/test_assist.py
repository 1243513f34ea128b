from klondike import (
    EventBus, Game, Move, PileRef, Slot, collect_moves, find_hint, has_available_moves, is_won,
)

from conftest import c, make_board

ALL_KINGS = {'hearts': 'K', 'diamonds': 'K', 'clubs': 'K', 'spades': 'K'}


def stuck_board(extra_stock=()):
    """Every card face down in column 0 under the Q♠, nothing else anywhere."""
    board = make_board()
    keep = [card.id for card in extra_stock]
    cards = [card for card in board.stock if card.id not in keep and card.id != 'spades-Q']
    queen = c('Qs')
    board.tableau[0] = cards + [queen]
    board.stock = [card for card in board.stock if card.id in keep]
    return board


def test_hint_prefers_foundation():
    board = make_board(tableau=[[c('8s')], [c('7h')]], waste=[c('Ad')])
    hint = find_hint(board)
    assert hint.type == 'foundation'
    assert hint.card_id == 'diamonds-A'
    assert hint.move == Move(PileRef.waste(), PileRef.foundation('diamonds'))


def test_hint_tableau_move():
    board = make_board(tableau=[[c('8s')], [c('7h')]])
    hint = find_hint(board)
    assert hint.type == 'tableau'
    assert hint.card_id == 'hearts-7'
    assert hint.move == Move(PileRef.tableau(1), PileRef.tableau(0))


def test_hint_falls_back_to_stock():
    board = make_board(tableau=[[c('8s')]])
    hint = find_hint(board)
    assert hint.type == 'stock'
    assert hint.card_id == board.stock[-1].id
    assert hint.move.is_draw


def test_hint_for_run_names_its_base_card():
    board = make_board(tableau=[[c('3c', False), c('9s'), c('8h')], [c('10d')]])
    hint = find_hint(board)
    assert hint.card_id == 'spades-9'
    assert hint.move.count == 2


def test_no_hint_when_won_or_stuck():
    won = make_board(foundations=ALL_KINGS)
    assert is_won(won)
    assert find_hint(won) is None
    assert has_available_moves(won)

    stuck = stuck_board()
    stuck.check_conservation()
    assert find_hint(stuck) is None
    assert not has_available_moves(stuck)


def test_buried_stock_card_counts_as_move():
    board = stuck_board(extra_stock=[c('Ah', False)])
    board.check_conservation()
    assert has_available_moves(board)


def test_collect_plan_is_bounded_and_ordered():
    board = make_board(foundations={'hearts': '5'}, tableau=[[c('7h')], [c('6h')]], waste=[c('8h')])
    plan = collect_moves(board)
    assert plan == [
        Move(PileRef.tableau(1), PileRef.foundation('hearts')),
        Move(PileRef.tableau(0), PileRef.foundation('hearts')),
        Move(PileRef.waste(), PileRef.foundation('hearts')),
    ]
    assert len(board.foundations['hearts']) == 5
    assert collect_moves(make_board(tableau=[[c('8s')]])) == []


def test_game_flags_no_moves_once():
    calls = []
    bus = EventBus()
    bus.subscribe(Slot.NO_MOVES, calls.append)
    game = Game(sink=bus, auto_collect=False)
    game.load_board(stuck_board())
    assert game.has_no_moves
    assert game.check_for_available_moves() is True
    assert len(calls) == 1
    game.load_board(stuck_board(extra_stock=[c('Ah', False)]))
    assert not game.has_no_moves


def test_auto_collect_finishes_game():
    events = []
    bus = EventBus()
    bus.subscribe(Slot.CARD_TO_FOUNDATION, lambda card, points, pos: events.append((card.id, points, pos)))
    bus.subscribe(Slot.GAME_WON, lambda board: events.append('won'))
    game = Game(sink=bus, auto_collect=True)
    game.load_board(make_board(
        foundations={'hearts': 'Q', 'diamonds': 'Q', 'clubs': 'Q', 'spades': '10'},
        tableau=[[c('Kh')], [c('Kd')], [c('Kc')], [c('Ks')], [c('Qs')]],
        waste=[c('Js')],
    ))
    assert game.move(Move(PileRef.waste(), PileRef.foundation('spades')), position=(5, 6))
    assert game.is_won
    assert events[0] == ('spades-J', 55, (5, 6))
    assert [e[0] for e in events[1:-1]] == ['hearts-K', 'diamonds-K', 'clubs-K', 'spades-Q', 'spades-K']
    assert events[-1] == 'won'
    assert events.count('won') == 1
    assert game.get_hint() is None
    assert not game.has_no_moves


def test_collect_all_available_is_undoable(game):
    game.load_board(make_board(foundations={'hearts': '5'}, tableau=[[c('7h')], [c('6h')]]))
    applied = game.collect_all_available()
    assert len(applied) == 2
    assert len(game.snapshots) == 3
    game.undo()
    assert game.board.foundations['hearts'][-1].rank == '6'


def test_hint_cleared_by_move(game):
    game.load_board(make_board(tableau=[[c('8s')], [c('7h')]]))
    hint = game.get_hint()
    assert game.hint is hint
    game.move(hint.move)
    assert game.hint is None
    game.get_hint()
    game.clear_hint()
    assert game.hint is None
