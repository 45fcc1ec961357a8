"""Numbering model captures list definitions extracted from numbering.xml."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

BULLET_FORMAT = "bullet"


@dataclass(slots=True)
class NumberingLevel:
    """Defines numbering behavior for a specific indentation level."""

    level_index: int
    start: Optional[int]
    num_format: Optional[str]
    level_text: Optional[str]
    alignment: Optional[str] = None

    @property
    def is_bullet(self) -> bool:
        return self.num_format == BULLET_FORMAT


@dataclass(slots=True)
class AbstractNumberingDefinition:
    """Template describing multi-level numbering behavior."""

    abstract_num_id: int
    name: Optional[str]
    style_link: Optional[str]
    levels: Dict[int, NumberingLevel] = field(default_factory=dict)

    @property
    def is_bullet(self) -> bool:
        first = self.levels.get(0)
        return bool(first and first.is_bullet)


@dataclass(slots=True)
class NumberingInstance:
    """Concrete numbering instance bound to an abstract definition."""

    num_id: int
    abstract_num_id: int
    start_overrides: Dict[int, int] = field(default_factory=dict)


@dataclass(slots=True)
class NumberingCatalog:
    """Collection of abstract definitions and concrete numbering instances."""

    abstracts: Dict[int, AbstractNumberingDefinition] = field(default_factory=dict)
    instances: Dict[int, NumberingInstance] = field(default_factory=dict)

    def get_abstract(self, abstract_num_id: Optional[int]) -> Optional[AbstractNumberingDefinition]:
        if abstract_num_id is None:
            return None
        return self.abstracts.get(abstract_num_id)

    def get_instance(self, num_id: Optional[int]) -> Optional[NumberingInstance]:
        if num_id is None:
            return None
        return self.instances.get(num_id)

    def level_for(self, num_id: Optional[int], level: int) -> Optional[NumberingLevel]:
        instance = self.get_instance(num_id)
        if instance is None:
            return None
        abstract = self.get_abstract(instance.abstract_num_id)
        if abstract is None:
            return None
        return abstract.levels.get(level)

    def start_for(self, num_id: int, level: int) -> int:
        """First counter value of ``level`` in instance ``num_id``, honouring overrides."""
        instance = self.get_instance(num_id)
        if instance is not None and level in instance.start_overrides:
            return instance.start_overrides[level]
        level_def = self.level_for(num_id, level)
        if level_def is not None and level_def.start is not None:
            return level_def.start
        return 1

    def find_abstract(self, bullet: bool, preferred: Iterable[int] = ()) -> Optional[AbstractNumberingDefinition]:
        """Pick an abstract definition of the requested flavour, trying ``preferred`` ids first."""
        for abstract_id in preferred:
            abstract = self.abstracts.get(abstract_id)
            if abstract is not None and abstract.is_bullet == bullet:
                return abstract
        for abstract in self.abstracts.values():
            if abstract.levels and abstract.is_bullet == bullet:
                return abstract
        return None

    def next_num_id(self) -> int:
        return max(self.instances, default=0) + 1

    def next_abstract_id(self) -> int:
        return max(self.abstracts, default=-1) + 1
