from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List

import numpy as np

from corrsketch.errors import InvalidInputError


class ColumnType(enum.Enum):
    """The declared type of the values of a column."""

    NUMERICAL = 1
    CATEGORICAL = 2

    @classmethod
    def from_int(cls, value: int) -> ColumnType:
        for column_type in cls:
            if column_type.value == value:
                return column_type
        raise InvalidInputError("No column type for the given value=[%r]." % value)


class Column(object):
    """An array of values tagged with a :class:`ColumnType`.

    Categorical values are integer codes stored as floats.
    """

    __slots__ = ("values", "type")

    def __init__(self, values, column_type: ColumnType = ColumnType.NUMERICAL) -> None:
        self.values = np.asarray(values, dtype=np.float64)
        self.type = column_type

    @classmethod
    def numerical(cls, *values) -> Column:
        return cls(values, ColumnType.NUMERICAL)

    @classmethod
    def categorical(cls, *values) -> Column:
        return cls(values, ColumnType.CATEGORICAL)

    def values_as_ints(self) -> np.ndarray:
        return self.values.astype(np.int64)

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return "Column(values=%r, type=%s)" % (self.values.tolist(), self.type.name)


@dataclass(frozen=True)
class ColumnPair:
    """A join key column paired with a value column of the same table.

    This is the only input a data loader has to provide: ``keys[i]`` is the
    join key of the row holding ``values[i]``. Keys do not need to be unique.
    """

    dataset_id: str
    key_name: str
    keys: List[str]
    column_name: str
    value_type: ColumnType
    values: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        if len(self.keys) != len(values):
            raise InvalidInputError(
                "keys and values must have same size. keys.size=[%d] values.size=[%d]"
                % (len(self.keys), len(values))
            )
        if not isinstance(self.value_type, ColumnType):
            raise InvalidInputError("value_type must be a ColumnType, got %r" % (self.value_type,))
        object.__setattr__(self, "values", values)

    @property
    def id(self) -> str:
        return "%s/%s/%s" % (self.dataset_id, self.key_name, self.column_name)

    def column(self) -> Column:
        return Column(self.values, self.value_type)

    def __len__(self) -> int:
        return len(self.keys)
