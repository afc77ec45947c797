import pytest

from domain.goals import Goal


def test_goal_defaults():
    goal = Goal(title="  New fridge ")
    assert goal.title == "New fridge"
    assert goal.note is None
    assert goal.done is False
    assert goal.id


@pytest.mark.parametrize("title", ["", "   ", None])
def test_goal_requires_title(title):
    with pytest.raises(ValueError):
        Goal(title=title)


def test_goal_requires_id():
    with pytest.raises(ValueError):
        Goal(title="Tent", id="")


def test_with_done_returns_new_goal():
    goal = Goal(title="Tent", id="g1")
    done = goal.with_done(True)
    assert done.done is True
    assert goal.done is False
    assert done.id == goal.id


def test_toggling_twice_with_same_value_is_idempotent():
    goal = Goal(title="Tent", id="g1")
    assert goal.with_done(True).with_done(True) == goal.with_done(True)
