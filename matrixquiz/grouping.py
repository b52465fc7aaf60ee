"""
Grouping of flat specification items into a topic -> unit -> outcome tree.

The tree drives every hierarchical table: a topic cell spans all outcome
rows beneath it, a unit cell spans its own outcome rows. ``leaf_rows``
computes those spans in the same pass that emits the rows, so a span can
never disagree with the number of rows rendered under it.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from matrixquiz.specification import SpecificationItem, outcome_key
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES, empty_counts


@dataclass
class OutcomeGroup:
    """Innermost level: one learning outcome and its (type, level) quantities."""

    learning_outcome: str
    counts: Dict[str, Dict[str, int]] = field(default_factory=empty_counts)

    @property
    def total(self) -> int:
        return sum(self.counts[t][lvl] for t in QUESTION_TYPES for lvl in COGNITIVE_LEVELS)


@dataclass(frozen=True)
class SpecificationRow:
    """One rendered row of the specification table.

    ``topic_span`` / ``unit_span`` are non-zero only on the first row of
    their group; renderers emit the merged cell there and skip it elsewhere.
    """

    topic: str
    knowledge_unit: str
    learning_outcome: str
    counts: Dict[str, Dict[str, int]]
    total: int
    topic_span: int = 0
    unit_span: int = 0

    @property
    def starts_topic(self) -> bool:
        return self.topic_span > 0

    @property
    def starts_unit(self) -> bool:
        return self.unit_span > 0

    def cell_values(self) -> List[int]:
        return [self.counts[t][lvl] for t in QUESTION_TYPES for lvl in COGNITIVE_LEVELS]


class GroupedSpecification:
    """Insertion-ordered 4-level view over specification items.

    Build it with :func:`group_specification`; it is not meant to be
    mutated afterwards.
    """

    def __init__(self):
        # topic -> unit -> outcome key -> OutcomeGroup
        self._tree: Dict[str, Dict[str, Dict[str, OutcomeGroup]]] = {}

    def _add(self, item: SpecificationItem):
        units = self._tree.setdefault(item.topic, {})
        outcomes = units.setdefault(item.knowledge_unit, {})
        key = outcome_key(item.learning_outcome)
        group = outcomes.get(key)
        if group is None:
            group = outcomes[key] = OutcomeGroup(learning_outcome=item.learning_outcome)
        group.counts[item.question_type][item.cognitive_level] += item.quantity

    @property
    def topics(self) -> List[str]:
        return list(self._tree)

    def units(self, topic: str) -> List[str]:
        return list(self._tree.get(topic, {}))

    def outcomes(self, topic: str, knowledge_unit: str) -> List[OutcomeGroup]:
        return list(self._tree.get(topic, {}).get(knowledge_unit, {}).values())

    def quantity(self, topic, knowledge_unit, learning_outcome, question_type, level) -> int:
        group = self._tree.get(topic, {}).get(knowledge_unit, {}).get(outcome_key(learning_outcome))
        if group is None:
            return 0
        return group.counts[question_type][level]

    def topic_span(self, topic: str) -> int:
        return sum(len(outcomes) for outcomes in self._tree.get(topic, {}).values())

    def unit_span(self, topic: str, knowledge_unit: str) -> int:
        return len(self._tree.get(topic, {}).get(knowledge_unit, {}))

    def __len__(self):
        return sum(self.topic_span(topic) for topic in self._tree)

    def __bool__(self):
        return bool(self._tree)

    def leaf_rows(self) -> List[SpecificationRow]:
        """All outcome rows in first-seen order, with spans on group heads."""
        rows: List[SpecificationRow] = []
        for topic, units in self._tree.items():
            topic_rows = []
            for unit, outcomes in units.items():
                groups = list(outcomes.values())
                for i, group in enumerate(groups):
                    topic_rows.append(
                        SpecificationRow(
                            topic=topic,
                            knowledge_unit=unit,
                            learning_outcome=group.learning_outcome,
                            counts=group.counts,
                            total=group.total,
                            unit_span=len(groups) if i == 0 else 0,
                        )
                    )
            if topic_rows:
                head = topic_rows[0]
                topic_rows[0] = SpecificationRow(
                    topic=head.topic,
                    knowledge_unit=head.knowledge_unit,
                    learning_outcome=head.learning_outcome,
                    counts=head.counts,
                    total=head.total,
                    topic_span=len(topic_rows),
                    unit_span=head.unit_span,
                )
            rows.extend(topic_rows)
        return rows

    def __iter__(self) -> Iterator[SpecificationRow]:
        return iter(self.leaf_rows())

    def to_dict(self) -> dict:
        """Nested JSON-ready form: topic -> unit -> outcome -> type -> level -> qty.

        Zero cells are omitted, mirroring the sparse tree the UI consumes.
        """
        result = {}
        for topic, units in self._tree.items():
            result[topic] = {}
            for unit, outcomes in units.items():
                result[topic][unit] = {}
                for group in outcomes.values():
                    cells = {}
                    for q_type in QUESTION_TYPES:
                        levels = {lvl: n for lvl, n in group.counts[q_type].items() if n}
                        if levels:
                            cells[q_type] = levels
                    result[topic][unit][group.learning_outcome] = cells
        return result


def group_specification(items: List[SpecificationItem]) -> GroupedSpecification:
    """Group items in one pass; repeated combinations have quantities summed."""
    grouped = GroupedSpecification()
    for item in items:
        grouped._add(item)
    return grouped
