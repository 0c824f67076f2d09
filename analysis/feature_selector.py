"""
Feature Selection

Pick named subsets of columns from the debate table by naming convention.

Columns follow a tagging scheme:
- main LIWC features start with the main tag (e.g. 'prop_health')
- group-by-feature interaction terms start with the group tag and also
  contain the main tag (e.g. 'groupfor_prop_health')
- the group main term starts with the group tag only (e.g. 'groupfor')

Name rules are small predicate objects that compose with &, | and ~, so
"starts with 'group' but not an interaction term" reads as
StartsWith('group') & ~Contains('prop').
"""

from dataclasses import dataclass, field
from typing import List, Optional, Iterable, Dict, Any, Union
import pandas as pd

from .errors import SchemaError


def as_frame(table: Any) -> pd.DataFrame:
    """
    Return the DataFrame behind a table-like object.

    Accepts a DataFrame or any object exposing one as `.df`
    (e.g. data.debates.DebateTable).
    """
    if isinstance(table, pd.DataFrame):
        return table
    if hasattr(table, 'df') and isinstance(table.df, pd.DataFrame):
        return table.df
    raise TypeError(f"Expected a DataFrame or table with a .df attribute, got {type(table)}")


class NamePredicate:
    """Base class for column-name rules."""

    def matches(self, name: str) -> bool:
        raise NotImplementedError("Subclasses must implement matches()")

    def __call__(self, name: str) -> bool:
        return self.matches(name)

    def __and__(self, other: 'NamePredicate') -> 'NamePredicate':
        return _AllOf(self, other)

    def __or__(self, other: 'NamePredicate') -> 'NamePredicate':
        return _AnyOf(self, other)

    def __invert__(self) -> 'NamePredicate':
        return _Not(self)


class StartsWith(NamePredicate):
    """Column name starts with a tag."""

    def __init__(self, tag: str):
        self.tag = tag

    def matches(self, name: str) -> bool:
        return name.startswith(self.tag)

    def __repr__(self) -> str:
        return f"StartsWith({self.tag!r})"


class Contains(NamePredicate):
    """Column name contains a tag anywhere."""

    def __init__(self, tag: str):
        self.tag = tag

    def matches(self, name: str) -> bool:
        return self.tag in name

    def __repr__(self) -> str:
        return f"Contains({self.tag!r})"


class InColumns(NamePredicate):
    """Column name is one of an explicit list."""

    def __init__(self, names: Iterable[str]):
        self.names = list(names)

    def matches(self, name: str) -> bool:
        return name in self.names

    def __repr__(self) -> str:
        return f"InColumns({self.names!r})"


class _AllOf(NamePredicate):
    def __init__(self, *predicates: NamePredicate):
        self.predicates = predicates

    def matches(self, name: str) -> bool:
        return all(p.matches(name) for p in self.predicates)

    def __repr__(self) -> str:
        return " & ".join(repr(p) for p in self.predicates)


class _AnyOf(NamePredicate):
    def __init__(self, *predicates: NamePredicate):
        self.predicates = predicates

    def matches(self, name: str) -> bool:
        return any(p.matches(name) for p in self.predicates)

    def __repr__(self) -> str:
        return " | ".join(repr(p) for p in self.predicates)


class _Not(NamePredicate):
    def __init__(self, predicate: NamePredicate):
        self.predicate = predicate

    def matches(self, name: str) -> bool:
        return not self.predicate.matches(name)

    def __repr__(self) -> str:
        return f"~{self.predicate!r}"


@dataclass(frozen=True)
class FeatureSet:
    """
    Disjoint column roles for one analysis.

    Every group keeps the table's native column order.
    """
    main: List[str] = field(default_factory=list)
    interaction: List[str] = field(default_factory=list)
    descriptive: List[str] = field(default_factory=list)
    outcome: List[str] = field(default_factory=list)

    GROUPS = ('main', 'interaction', 'descriptive', 'outcome')

    def __post_init__(self):
        seen: Dict[str, str] = {}
        for group in self.GROUPS:
            for column in getattr(self, group):
                if column in seen:
                    raise SchemaError(
                        f"Column '{column}' assigned to both '{seen[column]}' and '{group}'",
                        column=column
                    )
                seen[column] = group

    def group(self, name: str) -> List[str]:
        """Columns of one group by name."""
        if name not in self.GROUPS:
            raise ValueError(f"Unknown feature group: {name}. Expected one of {self.GROUPS}")
        return list(getattr(self, name))

    def role_of(self, column: str) -> Optional[str]:
        """Group a column belongs to, or None."""
        for group in self.GROUPS:
            if column in getattr(self, group):
                return group
        return None

    def summary(self) -> str:
        return ", ".join(f"{g}={len(getattr(self, g))}" for g in self.GROUPS)


@dataclass
class FeatureRoles:
    """Naming convention used to build a FeatureSet."""
    main_tag: str = 'prop'
    group_tag: str = 'group'
    id_columns: List[str] = field(default_factory=lambda: ['debate_id', 'speaker_id', 'group'])
    outcome_column: str = 'deltaV'
    # Debater-identifying columns that happen to carry the main tag
    exclude_columns: List[str] = field(default_factory=list)


class FeatureSelector:
    """
    Select columns by name rule.

    Exclusion composes: a column is kept if it matches `predicate`, does
    not match `exclude`, and is not listed in `exclude_columns`.
    """

    def select(
        self,
        table: Union[pd.DataFrame, Any],
        predicate: NamePredicate,
        exclude: Optional[NamePredicate] = None,
        exclude_columns: Optional[Iterable[str]] = None
    ) -> List[str]:
        """
        Select matching columns in the table's native order.

        Args:
            table: DataFrame or table-like object
            predicate: Rule a column name must match
            exclude: Rule removing columns that also match it
            exclude_columns: Explicit columns to drop; each must exist

        Returns:
            Ordered list of column names

        Raises:
            SchemaError: If an exclusion column is not in the table
        """
        df = as_frame(table)
        columns = [str(c) for c in df.columns]

        excluded = list(exclude_columns or [])
        missing = [c for c in excluded if c not in columns]
        if missing:
            raise SchemaError(
                f"Exclusion column(s) not found in table: {missing}",
                column=missing[0]
            )

        selected = []
        for name in columns:
            if not predicate.matches(name):
                continue
            if exclude is not None and exclude.matches(name):
                continue
            if name in excluded:
                continue
            selected.append(name)
        return selected

    def build_feature_set(
        self,
        table: Union[pd.DataFrame, Any],
        roles: Optional[FeatureRoles] = None
    ) -> FeatureSet:
        """
        Partition the table's columns into main / interaction /
        descriptive / outcome groups.

        Raises:
            SchemaError: If a descriptive or outcome column is missing,
                or an exclusion column does not exist
        """
        roles = roles or FeatureRoles()
        df = as_frame(table)
        columns = [str(c) for c in df.columns]

        for required in list(roles.id_columns) + [roles.outcome_column]:
            if required not in columns:
                raise SchemaError(f"Required column '{required}' not found in table", column=required)

        reserved = InColumns(list(roles.id_columns) + [roles.outcome_column])

        main = self.select(
            df,
            StartsWith(roles.main_tag),
            exclude=reserved,
            exclude_columns=roles.exclude_columns
        )
        interaction = self.select(
            df,
            StartsWith(roles.group_tag) & Contains(roles.main_tag),
            exclude=reserved
        )
        descriptive = [c for c in columns if c in roles.id_columns]

        return FeatureSet(
            main=main,
            interaction=interaction,
            descriptive=descriptive,
            outcome=[roles.outcome_column]
        )

    def group_main_terms(
        self,
        table: Union[pd.DataFrame, Any],
        roles: Optional[FeatureRoles] = None
    ) -> List[str]:
        """Group dummy columns (group tag without the main tag)."""
        roles = roles or FeatureRoles()
        return self.select(
            table,
            StartsWith(roles.group_tag) & ~Contains(roles.main_tag),
            exclude=InColumns(roles.id_columns)
        )
