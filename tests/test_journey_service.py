from datetime import datetime

import pytest

from connect_vida.models import GrowthTrack, JourneyStage, JourneyStep, MemberProgress
from connect_vida.services.journey_service import (
    JourneyError,
    apply_quiz_attempt,
    build_journey_view,
    grade_quiz,
    percent,
)

QUESTIONS = [
    {"order": 1, "question": "Q1", "options": ["a", "b"], "correct_option": 0, "points": 1},
    {"order": 2, "question": "Q2", "options": ["a", "b", "c"], "correct_option": 2, "points": 3},
]


def make_track():
    track = GrowthTrack(id="t1", church_id="c1", title="Trilha", is_active=True)
    stages = [
        JourneyStage(id="s1", track_id="t1", order=1, title="Etapa 1"),
        JourneyStage(id="s2", track_id="t1", order=2, title="Etapa 2"),
        JourneyStage(id="s3", track_id="t1", order=3, title="Etapa 3"),
    ]
    steps = [
        JourneyStep(id="p1", stage_id="s1", order=1, title="Vídeo", step_type="video"),
        JourneyStep(id="p2", stage_id="s1", order=2, title="Quiz", step_type="quiz", quiz_questions=QUESTIONS),
        JourneyStep(id="p3", stage_id="s2", order=1, title="Leitura", step_type="leitura"),
    ]
    return track, stages, steps


def done(step_id):
    return MemberProgress(member_id="m1", step_id=step_id, status="concluido", completed_at=datetime(2024, 1, 1))


def test_percent():
    assert percent(0, 0) == 0
    assert percent(1, 3) == 33
    assert percent(1, 8) == 13
    assert percent(3, 3) == 100


def test_view_without_track():
    view = build_journey_view(None, [], [], [])
    assert view["track"] is None
    assert view["stages"] == []
    assert view["overall_progress"] == 0


def test_first_stage_never_locked_and_next_locked_until_complete():
    track, stages, steps = make_track()
    view = build_journey_view(track, stages, steps, [done("p1")])

    first, second, third = view["stages"]
    assert first["is_locked"] is False
    assert first["all_steps_completed"] is False
    assert second["is_locked"] is True
    assert second["lock_reason"]
    assert view["completed_steps"] == 1
    assert view["total_steps"] == 3
    assert view["overall_progress"] == 33
    assert view["current_level"] == 0


def test_completed_stage_unlocks_next_and_empty_stage_never_completes():
    track, stages, steps = make_track()
    view = build_journey_view(track, stages, steps, [done("p1"), done("p2"), done("p3")])

    first, second, third = view["stages"]
    assert first["all_steps_completed"] is True
    assert second["is_locked"] is False
    assert second["all_steps_completed"] is True
    # etapa sem passos nunca conta como concluída
    assert third["steps"] == []
    assert third["all_steps_completed"] is False
    assert third["is_locked"] is False
    assert view["current_level"] == 2
    assert view["overall_progress"] == 100


def test_quiz_answers_are_hidden_from_member_view():
    track, stages, steps = make_track()
    view = build_journey_view(track, stages, steps, [])
    quiz = view["stages"][0]["steps"][1]
    assert all("correct_option" not in q for q in quiz["quiz_questions"])


def test_grade_quiz_weights_points():
    assert grade_quiz(QUESTIONS, {"1": 0, "2": 2}) == 100.0
    assert grade_quiz(QUESTIONS, {"1": 0, "2": 1}) == 25.0
    assert grade_quiz(QUESTIONS, {1: 1, 2: 2}) == 75.0
    assert grade_quiz(QUESTIONS, {}) == 0.0
    assert grade_quiz([], {"1": 0}) == 0.0


def test_quiz_blocks_after_max_failed_attempts():
    progress = MemberProgress(member_id="m1", step_id="p2", status="pendente", quiz_attempts=0, quiz_blocked=False)

    assert apply_quiz_attempt(progress, 40, 70, 3) is False
    assert apply_quiz_attempt(progress, 50, 70, 3) is False
    assert progress.quiz_blocked is False
    assert apply_quiz_attempt(progress, 60, 70, 3) is False
    assert progress.quiz_blocked is True
    assert progress.quiz_attempts == 3

    with pytest.raises(JourneyError) as exc:
        apply_quiz_attempt(progress, 100, 70, 3)
    assert exc.value.status_code == 409


def test_quiz_pass_completes_step():
    progress = MemberProgress(member_id="m1", step_id="p2", status="pendente", quiz_attempts=1, quiz_blocked=False)

    assert apply_quiz_attempt(progress, 70, 70, 3, answers={"1": 0}) is True
    assert progress.is_completed
    assert progress.completed_at is not None
    assert progress.quiz_score == 70

    with pytest.raises(JourneyError):
        apply_quiz_attempt(progress, 100, 70, 3)
