"""
Component Interpretation

Describe a component by the features that load most strongly on it in
either direction.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, NamedTuple, Mapping, Iterable
import logging
import pandas as pd

from .errors import InsufficientDataError

logger = logging.getLogger(__name__)


class FeatureLoading(NamedTuple):
    feature: str
    label: str
    loading: float


@dataclass(frozen=True)
class ComponentProfile:
    """Top-N and bottom-N loadings of one component."""
    component: int
    top: List[FeatureLoading] = field(default_factory=list)
    bottom: List[FeatureLoading] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"C{self.component}"

    def overlap(self) -> List[str]:
        """Features present in both lists (possible when features < 2n)."""
        bottom = {f.feature for f in self.bottom}
        return [f.feature for f in self.top if f.feature in bottom]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for side, entries in (('top', self.top), ('bottom', self.bottom)):
            for rank, entry in enumerate(entries, start=1):
                rows.append({
                    'component': self.component,
                    'side': side,
                    'rank': rank,
                    'feature': entry.feature,
                    'label': entry.label,
                    'loading': entry.loading
                })
        return pd.DataFrame(rows, columns=['component', 'side', 'rank', 'feature', 'label', 'loading'])

    def describe(self) -> str:
        top = ", ".join(f"{f.label} ({f.loading:+.3f})" for f in self.top)
        bottom = ", ".join(f"{f.label} ({f.loading:+.3f})" for f in self.bottom)
        return f"{self.name}: high = {top}; low = {bottom}"


def default_labels(features: Iterable[str], tag: str = 'prop') -> Dict[str, str]:
    """
    Display labels made by stripping the tag prefix and separators,
    e.g. 'prop_health' -> 'health'.
    """
    labels = {}
    for feature in features:
        label = feature[len(tag):] if tag and feature.startswith(tag) else feature
        labels[feature] = label.lstrip('_.:- ') or feature
    return labels


class ComponentInterpreter:
    """
    Rank features by their loading on one component.

    Args:
        labels: Default feature -> display label lookup
    """

    def __init__(self, labels: Optional[Mapping[str, str]] = None):
        self.labels = dict(labels or {})

    def profile(
        self,
        loadings: pd.DataFrame,
        component: int,
        n: int,
        labels: Optional[Mapping[str, str]] = None
    ) -> ComponentProfile:
        """
        Top-n highest and n lowest loadings of a component.

        Args:
            loadings: Features x components DataFrame (DecompositionResult.loadings)
            component: 1-based component number (C1 -> 1)
            n: Entries per side; 1 <= n <= number of features
            labels: Display-label lookup overriding the instance default

        Returns:
            ComponentProfile; top and bottom may share entries

        Raises:
            InsufficientDataError: Component out of range or n invalid
        """
        n_components = loadings.shape[1]
        if not 1 <= component <= n_components:
            raise InsufficientDataError(
                f"Component {component} requested but only {n_components} are available",
                component=component
            )
        n_features = loadings.shape[0]
        if not 1 <= n <= n_features:
            raise InsufficientDataError(
                f"Cannot list {n} loadings per side from {n_features} features",
                component=component
            )

        lookup = dict(self.labels)
        if labels:
            lookup.update(labels)

        column = loadings.iloc[:, component - 1].astype(float)
        # Stable sort keeps table order among equal loadings
        ordered = column.sort_values(ascending=False, kind='mergesort')

        def entry(feature) -> FeatureLoading:
            return FeatureLoading(str(feature), lookup.get(str(feature), str(feature)), float(column[feature]))

        top = [entry(f) for f in ordered.index[:n]]
        lowest_first = column.sort_values(ascending=True, kind='mergesort')
        bottom = [entry(f) for f in lowest_first.index[:n]]

        profile = ComponentProfile(component=component, top=top, bottom=bottom)
        if profile.overlap():
            logger.debug(f"C{component}: top and bottom share {len(profile.overlap())} feature(s)")
        return profile

    def profile_all(
        self,
        loadings: pd.DataFrame,
        n: int,
        components: Optional[Iterable[int]] = None,
        labels: Optional[Mapping[str, str]] = None
    ) -> List[ComponentProfile]:
        """Profiles for several components (default: all)."""
        if components is None:
            components = range(1, loadings.shape[1] + 1)
        return [self.profile(loadings, c, n, labels) for c in components]
