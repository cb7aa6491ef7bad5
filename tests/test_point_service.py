import pytest
from sqlalchemy.exc import OperationalError

from storage.repository import point_history as history_repo
from storage.repository import user_points as points_repo
from storage.service import point as point_service


def balance(user_id):
    return points_repo.get_user_points(user_id)


class TestAddRemove:
    def test_add_points_raises_total_and_current(self, user_id):
        point_service.add_points(user_id, "game_play", 7, "played")
        up = balance(user_id)
        assert up.total_points == 7
        assert up.current_points == 7

    def test_remove_points_keeps_total(self, user_id):
        point_service.add_points(user_id, "game_play", 10, "played")
        point_service.remove_points(user_id, "game_play", 4, "refund")
        up = balance(user_id)
        assert up.total_points == 10
        assert up.current_points == 6

    def test_balance_never_negative(self, user_id):
        point_service.add_points(user_id, "task_completion", 10, "done", task_id="t1")
        point_service.remove_points(user_id, "task_completion", 15, "undo", task_id="t1")
        up = balance(user_id)
        assert up.current_points == 0
        assert up.total_points == 10

    @pytest.mark.parametrize("points", [0, -5])
    def test_non_positive_amount_is_ignored(self, user_id, points):
        assert point_service.add_points(user_id, "game_play", points, "nope") is None
        assert point_service.remove_points(user_id, "game_play", points, "nope") is None
        assert history_repo.list_entries(user_id) == []

    def test_missing_user_is_ignored(self):
        assert point_service.add_points("", "game_play", 5, "nope") is None
        assert point_service.revoke_task_completion_points("", "t1", "x") == 0

    def test_unknown_type_is_ignored(self, user_id):
        assert point_service.add_points(user_id, "lottery", 5, "nope") is None

    def test_history_is_append_only(self, user_id):
        point_service.add_points(user_id, "task_completion", 10, "done", task_id="t1")
        point_service.remove_points(user_id, "task_completion", 10, "undo", task_id="t1")
        entries = history_repo.list_entries(user_id, task_id="t1")
        assert sorted(e.points for e in entries) == [-10, 10]

    def test_failed_balance_update_leaves_no_history(self, user_id, monkeypatch):
        point_service.add_points(user_id, "game_play", 10, "played")

        def fail(*args, **kwargs):
            raise OperationalError("UPDATE user_points", {}, Exception("database is locked"))

        monkeypatch.setattr(points_repo, "_add_to_balance", fail)
        assert point_service.award_task_completion_points(user_id, "t1", "Write", "high") == 0
        monkeypatch.undo()

        assert history_repo.list_entries(user_id, task_id="t1") == []
        assert point_service.revoke_task_completion_points(user_id, "t1", "Write") == 0
        up = balance(user_id)
        assert up.current_points == 10
        assert up.total_points == 10


class TestSpend:
    def test_spend_within_balance(self, user_id):
        point_service.add_points(user_id, "game_play", 20, "played")
        assert point_service.spend_points(user_id, 15, "Theme purchase") is True
        up = balance(user_id)
        assert up.current_points == 5
        assert up.total_points == 20
        spent = history_repo.list_entries(user_id, type="game_play")
        assert sorted(e.points for e in spent) == [-15, 20]

    def test_spend_refused_when_balance_too_low(self, user_id):
        point_service.add_points(user_id, "game_play", 10, "played")
        assert point_service.spend_points(user_id, 11, "Theme purchase") is False
        assert balance(user_id).current_points == 10
        assert len(history_repo.list_entries(user_id)) == 1
        assert point_service.feedback.message == "Not enough points (need 11)"

    def test_spend_exact_balance(self, user_id):
        point_service.add_points(user_id, "game_play", 10, "played")
        assert point_service.spend_points(user_id, 10, "Game") is True
        assert point_service.spend_points(user_id, 1, "Game") is False
        assert balance(user_id).current_points == 0

    def test_repository_rejects_second_spend(self, user_id):
        point_service.add_points(user_id, "game_play", 10, "played")
        entry = point_service._entry(user_id, "game_play", -8, "Game")
        assert points_repo.spend(entry) is not None
        assert points_repo.spend(entry) is None
        assert balance(user_id).current_points == 2

    @pytest.mark.parametrize("amount", [0, -3])
    def test_non_positive_amount_is_refused(self, user_id, amount):
        assert point_service.spend_points(user_id, amount, "Game") is False
        assert history_repo.list_entries(user_id) == []


class TestTaskCompletionPoints:
    @pytest.mark.parametrize("priority,expected", [
        ("low", 5), ("medium", 10), ("high", 15), ("urgent", 10), (None, 10),
    ])
    def test_priority_tiers(self, priority, expected):
        assert point_service.get_points_for_priority(priority) == expected

    def test_award_then_revoke_nets_zero(self, user_id):
        point_service.load_user_points(user_id)
        awarded = point_service.award_task_completion_points(user_id, "t1", "Write the report", "high")
        revoked = point_service.revoke_task_completion_points(user_id, "t1", "Write the report")
        assert awarded == revoked == 15
        up = balance(user_id)
        assert up.current_points == 0
        assert up.total_points == 15

    def test_revoke_is_idempotent(self, user_id):
        point_service.award_task_completion_points(user_id, "t1", "Write", "medium")
        first = point_service.revoke_task_completion_points(user_id, "t1", "Write")
        second = point_service.revoke_task_completion_points(user_id, "t1", "Write")
        assert first == 10
        assert second == 0
        assert balance(user_id).current_points == 0

    def test_revoke_without_award_returns_zero(self, user_id):
        assert point_service.revoke_task_completion_points(user_id, "t1", "Write") == 0
        assert history_repo.list_entries(user_id) == []

    def test_revoke_only_touches_its_task(self, user_id):
        point_service.award_task_completion_points(user_id, "t1", "One", "low")
        point_service.award_task_completion_points(user_id, "t2", "Two", "high")
        assert point_service.revoke_task_completion_points(user_id, "t1", "One") == 5
        assert balance(user_id).current_points == 15

    def test_reaward_after_revoke_can_be_revoked_again(self, user_id):
        point_service.award_task_completion_points(user_id, "t1", "One", "low")
        point_service.revoke_task_completion_points(user_id, "t1", "One")
        point_service.award_task_completion_points(user_id, "t1", "One", "low")
        assert point_service.revoke_task_completion_points(user_id, "t1", "One") == 5

    def test_task_revoke_ignores_subtask_awards(self, user_id):
        point_service.award_sub_task_completion_points(user_id, "t1", "s1", "step")
        assert point_service.revoke_task_completion_points(user_id, "t1", "One") == 0
        assert balance(user_id).current_points == 3


class TestSubTaskPoints:
    def test_award_and_revoke(self, user_id):
        assert point_service.award_sub_task_completion_points(user_id, "t1", "s1", "step") == 3
        assert point_service.revoke_sub_task_completion_points(user_id, "t1", "s1", "step") == 3
        assert point_service.revoke_sub_task_completion_points(user_id, "t1", "s1", "step") == 0
        assert balance(user_id).current_points == 0

    def test_same_text_subtasks_are_revoked_independently(self, user_id):
        point_service.award_sub_task_completion_points(user_id, "t1", "s1", "Read")
        point_service.award_sub_task_completion_points(user_id, "t1", "s2", "Read")
        assert point_service.revoke_sub_task_completion_points(user_id, "t1", "s1", "Read") == 3
        assert balance(user_id).current_points == 3
        assert point_service.revoke_sub_task_completion_points(user_id, "t1", "s2", "Read") == 3


class TestAggregates:
    def test_signed_sums(self, user_id):
        point_service.add_points(user_id, "task_completion", 10, "done", task_id="t1")
        point_service.remove_points(user_id, "task_completion", 4, "undo", task_id="t1")
        assert point_service.get_today_points(user_id) == 6
        assert point_service.get_weekly_points(user_id) == 6
        assert point_service.get_monthly_points(user_id) == 6

    def test_history_window_is_bounded(self, user_id):
        for i in range(point_service.HISTORY_WINDOW + 5):
            point_service.add_points(user_id, "game_play", 1, f"game {i}")
        assert len(point_service.load_point_history(user_id)) == point_service.HISTORY_WINDOW
        assert point_service.get_today_points(user_id) == point_service.HISTORY_WINDOW


class TestLoginBonus:
    def test_first_login_creates_record(self, user_id):
        up = point_service.load_user_points(user_id)
        assert up.total_points == 0
        assert up.current_points == 0

    def test_once_per_day(self, user_id):
        assert point_service.check_and_award_login_bonus(user_id, today="2026-10-19") == 10
        assert point_service.check_and_award_login_bonus(user_id, today="2026-10-19") == 0
        assert balance(user_id).current_points == 10

    def test_streak_grows_and_resets(self, user_id):
        point_service.check_and_award_login_bonus(user_id, today="2026-10-19")
        point_service.check_and_award_login_bonus(user_id, today="2026-10-20")
        assert point_service.check_and_award_login_bonus(user_id, today="2026-10-21") == 15
        up = balance(user_id)
        assert up.login_streak == 3
        assert up.total_points == 35

        point_service.check_and_award_login_bonus(user_id, today="2026-10-25")
        up = balance(user_id)
        assert up.login_streak == 1
        assert up.max_login_streak == 3

    def test_conditional_write_rejects_second_writer(self, user_id):
        point_service.load_user_points(user_id)
        entry = point_service._entry(user_id, "login_bonus", 10, "Login bonus")
        assert points_repo.apply_login_bonus(entry, "2026-10-19", 1, 1) is True
        assert points_repo.apply_login_bonus(entry, "2026-10-19", 1, 1) is False
        assert len(history_repo.list_entries(user_id, type="login_bonus")) == 1
        assert balance(user_id).total_points == 10

    @pytest.mark.parametrize("streak,expected", [(1, 10), (3, 15), (7, 20), (14, 30), (30, 50)])
    def test_bonus_tiers(self, streak, expected):
        assert point_service.get_login_bonus_points(streak) == expected
