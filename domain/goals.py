from dataclasses import dataclass, field, replace

from .entries import new_entry_id


@dataclass(frozen=True)
class Goal:
    """One purchase checklist item."""

    title: str
    note: str | None = None
    done: bool = False
    id: str = field(default_factory=new_entry_id)

    def __post_init__(self) -> None:
        title = str(self.title or "").strip()
        if not title:
            raise ValueError("Goal title must not be empty")
        object.__setattr__(self, "title", title)
        object.__setattr__(self, "done", bool(self.done))
        goal_id = str(self.id or "").strip()
        if not goal_id:
            raise ValueError("id must be a non-empty string")
        object.__setattr__(self, "id", goal_id)

    def with_done(self, done: bool) -> "Goal":
        return replace(self, done=bool(done))
