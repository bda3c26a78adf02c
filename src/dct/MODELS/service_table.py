"""
Models for the services declared in a single compose file.
"""
from dataclasses import dataclass, field
from typing import Iterator, List

import yaml


@dataclass(frozen=True)
class ServiceEntry:
    """
    A service name and its raw definition, kept as a YAML node so it can be
    written back out unchanged.
    """
    name: str
    definition: yaml.Node


@dataclass
class ServiceTable:
    """
    Services of one compose file, in declaration order.
    """
    entries: List[ServiceEntry] = field(default_factory=list)

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def __iter__(self) -> Iterator[ServiceEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
