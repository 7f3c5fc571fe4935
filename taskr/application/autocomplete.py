"""Path autocomplete.

Suggestions are computed from half-typed input: every completed
component must name an existing task (exact match), and the children
of the task reached are offered, sorted by name and filtered
case-insensitively by whatever follows the last separator.
"""

from dataclasses import dataclass, field
from uuid import UUID

from taskr.domain.task import (
    TaskListKind,
    TaskStore,
    encode_segment,
    tokenize_partial,
)


def suggest(
    store: TaskStore,
    text: str,
    template_id: UUID | None = None,
) -> list[str]:
    """Full, encoded path suggestions for partially typed text.

    Paths are relative to the live roots, or to the top of a template
    when template_id is given.
    """
    if not text.strip():
        return []

    kind = TaskListKind.LIVE
    parent_id = None
    if template_id is not None:
        kind = TaskListKind.TEMPLATE
        parent_id = store.template(template_id).root_id

    tokenized = tokenize_partial(text)
    for component in tokenized.components:
        parent_id = store.first_child_named(parent_id, component, kind)
        if parent_id is None:
            return []

    prefix = "/" + "".join(encode_segment(c) + "/" for c in tokenized.components)
    candidates = sorted(store.children(parent_id, kind), key=lambda node: node.name)

    if tokenized.ended_with_separator:
        return [prefix + encode_segment(node.name) for node in candidates]

    needle = tokenized.remainder.lower()
    return [
        prefix + encode_segment(node.name)
        for node in candidates
        if needle in node.name.lower()
    ]


@dataclass
class Autocomplete:
    """Suggestion list plus the highlighted entry, for an input field."""

    store: TaskStore
    template_id: UUID | None = None
    text: str = ""
    suggestions: list[str] = field(default_factory=list)
    selected_index: int | None = None

    def update(self, text: str) -> list[str]:
        self.text = text
        self.suggestions = suggest(self.store, text, self.template_id)
        self.selected_index = 0 if self.suggestions else None
        return self.suggestions

    def select_next(self) -> None:
        if not self.suggestions:
            return
        if self.selected_index is None:
            self.selected_index = 0
        else:
            self.selected_index = min(self.selected_index + 1, len(self.suggestions) - 1)

    def select_previous(self) -> None:
        if not self.suggestions:
            return
        if self.selected_index is None:
            self.selected_index = len(self.suggestions) - 1
        else:
            self.selected_index = max(0, self.selected_index - 1)

    @property
    def current(self) -> str | None:
        if self.selected_index is None:
            return None
        if 0 <= self.selected_index < len(self.suggestions):
            return self.suggestions[self.selected_index]
        return None

    def apply_selected(self) -> str:
        """Replace the input with the highlighted suggestion."""
        suggestion = self.current
        if suggestion is not None:
            self.update(suggestion)
        return self.text

    def clear(self) -> None:
        self.suggestions = []
        self.selected_index = None
