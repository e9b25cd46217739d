from trivia.models import Player
from trivia.services.questions.fallback import fallback_questions


def _running_room(services, players=('p1', 'p2')):
    room = services.registry.get_or_create('ABCD')
    for pid in players:
        room.players[pid] = Player(id=pid, nickname=pid.upper())
    room.creator_id = players[0] if players else None
    room.questions = fallback_questions()
    room.quiz_ready = True
    room.game_started = True
    return room


def _rounds(transport):
    return [p['index'] for p in transport.payloads('round')]


def test_start_round_sets_state_and_broadcasts(services, transport, runner):
    room = _running_room(services)
    room.players['p1'].has_answered = True

    services.scheduler.start_round(room, 0)

    assert room.round_active
    assert room.round_index == 0
    assert room.round_start_time == runner.now
    assert room.round_deadline == runner.now + 30000
    assert not any(p.has_answered for p in room.players.values())
    payload = transport.payloads('round')[0]
    assert payload['index'] == 1
    assert payload['total'] == 10
    assert payload['question'] == room.questions[0].text
    assert [o['label'] for o in payload['options']] == ['A', 'B', 'C', 'D']
    assert 'correctLabel' not in payload
    assert transport.payloads('timer') == [30]
    assert transport.payloads('scoreboard')[-1] == [
        {'id': 'p1', 'nickname': 'P1', 'score': 0},
        {'id': 'p2', 'nickname': 'P2', 'score': 0},
    ]
    assert room.timer_handle is not None


def test_countdown_ticks_every_second(services, transport, runner):
    room = _running_room(services)
    services.scheduler.start_round(room, 0)
    transport.clear()

    runner.advance(3)

    assert transport.payloads('timer') == [29, 28, 27]
    assert room.round_active


def test_timeout_ends_round_once_and_schedules_next(services, transport, runner):
    room = _running_room(services)
    services.scheduler.start_round(room, 0)
    runner.advance(29)
    # An all-answered end racing the deadline
    services.scheduler.schedule_round_end(room, 1.5)
    transport.clear()

    runner.advance(1)
    assert not room.round_active
    assert room.timer_handle is None
    assert transport.payloads('timer')[-1] == 0

    runner.advance(1.4)
    assert _rounds(transport) == []

    runner.advance(0.1)
    assert _rounds(transport) == [2]
    assert room.round_index == 1
    assert room.round_active

    runner.advance(5)
    assert _rounds(transport) == [2]


def test_all_answered_end_beats_timeout(services, transport, runner):
    room = _running_room(services)
    services.scheduler.start_round(room, 0)
    runner.advance(1)
    services.scheduler.schedule_round_end(room, 1.5)

    runner.advance(1.5)
    assert not room.round_active
    transport.clear()

    runner.advance(1.4)
    assert transport.payloads('timer') == []
    runner.advance(0.1)
    assert _rounds(transport) == [2]

    # The old round's deadline passes without ending the new round
    runner.advance(27)
    assert room.round_active
    assert room.round_index == 1


def test_arming_new_round_cancels_previous_tick(services, transport, runner):
    room = _running_room(services)
    services.scheduler.start_round(room, 0)
    first = room.timer_handle

    services.scheduler.start_round(room, 1)
    transport.clear()
    runner.advance(1)

    assert first.cancelled
    assert room.timer_handle is not first
    assert transport.payloads('timer') == [29]


def test_last_round_ends_game_with_ranking(services, transport, runner):
    room = _running_room(services, players=('p1', 'p2', 'p3', 'p4'))
    room.players['p1'].nickname, room.players['p1'].score = 'Bob', 10
    room.players['p2'].nickname, room.players['p2'].score = 'Alice', 10
    room.players['p3'].nickname, room.players['p3'].score = 'Zed', 20
    room.players['p4'].nickname, room.players['p4'].score = 'Bob', 10

    services.scheduler.start_round(room, 9)
    transport.clear()
    runner.advance(30)

    assert room.game_ended
    assert not room.game_started
    over = transport.payloads('gameOver')
    assert len(over) == 1
    assert over[0]['totalRounds'] == 10
    assert [(e['id'], e['nickname']) for e in over[0]['finalScoreboard']] == [
        ('p3', 'Zed'), ('p2', 'Alice'), ('p1', 'Bob'), ('p4', 'Bob'),
    ]
    states = transport.payloads('playersState')
    assert len(states) == 4
    assert all(s['gameEnded'] and not s['gameStarted'] for s in states)

    runner.advance(10)
    assert _rounds(transport) == []


def test_check_all_answered(services):
    room = services.registry.get_or_create('EMPTY')
    assert services.scheduler.check_all_answered(room) is False

    room = _running_room(services)
    assert services.scheduler.check_all_answered(room) is False
    room.players['p1'].has_answered = True
    assert services.scheduler.check_all_answered(room) is False
    room.players['p2'].has_answered = True
    assert services.scheduler.check_all_answered(room) is True


def test_deleted_room_never_starts_next_round(services, transport, runner):
    room = _running_room(services)
    services.scheduler.start_round(room, 0)
    runner.advance(30)
    services.registry.delete('ABCD')
    transport.clear()

    runner.advance(5)

    assert transport.sent == []


def test_send_round_to_late_joiner(services, transport, runner):
    room = _running_room(services)
    services.scheduler.start_round(room, 2)
    runner.advance(10)
    transport.clear()

    services.scheduler.send_round_to(room, 'late')

    assert transport.payloads('round', target='late')[0]['index'] == 3
    assert transport.payloads('timer', target='late') == [20]
    assert all(kind == 'unicast' for kind, *_ in transport.sent)
    assert room.round_index == 2
