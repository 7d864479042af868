"""
Service-category membership for professional accounts.

A professional lists one permanent primary category (chosen at signup)
and any number of additional categories, each of which adds a flat
monthly surcharge.  This module holds the value type and the pure
add/remove rules; persistence and fee recomputation happen in
``account_service``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Tuple, Union

from ..core.exceptions import (
    CannotRemovePrimary,
    CategoryNotFound,
    DuplicateCategory,
    InvalidAccountState,
    InvalidCategory,
)

_TRAILING_S = re.compile(r"s$")


@dataclass(frozen=True)
class ServiceCategorySet:
    """Primary category plus the set of additional categories.

    Construction does not validate so that broken stored data can still
    be represented and reported; call :meth:`validate` before relying on
    the invariants.
    """

    primary: str
    additional: FrozenSet[str] = field(default_factory=frozenset)

    def validate(self) -> None:
        """Raise ``InvalidAccountState`` if an invariant does not hold."""
        if not self.primary or not self.primary.strip():
            raise InvalidAccountState("Professional account has no primary service category")
        if self.primary in self.additional:
            raise InvalidAccountState(
                f"Primary service category '{self.primary}' is also listed as an additional service"
            )
        if any(not name or not name.strip() for name in self.additional):
            raise InvalidAccountState("Additional service categories must not be blank")

    @property
    def additional_count(self) -> int:
        return len(self.additional)

    @property
    def total_count(self) -> int:
        return 1 + len(self.additional)

    def sorted_additional(self) -> Tuple[str, ...]:
        return tuple(sorted(self.additional))

    def all_categories(self) -> Tuple[str, ...]:
        """Primary first, then additional categories alphabetically."""
        return (self.primary,) + self.sorted_additional()

    def __contains__(self, category: object) -> bool:
        return category == self.primary or category in self.additional


@dataclass(frozen=True)
class SimilarCategoryWarning:
    """Returned instead of a new set when the candidate resembles a listed category.

    Nothing has been applied; repeat the call with ``accept_similar=True``
    to add the category anyway.
    """

    candidate: str
    similar_to: Tuple[str, ...]

    @property
    def message(self) -> str:
        listed = ", ".join(f"'{name}'" for name in self.similar_to)
        return f"'{self.candidate}' looks similar to a service you already offer: {listed}"


def normalize_category(name: str) -> str:
    """Strip surrounding whitespace; blank names raise ``InvalidCategory``."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidCategory("Service category must not be empty")
    return cleaned


def _stem(name: str) -> str:
    return _TRAILING_S.sub("", name.lower())


def is_similar(existing: str, candidate: str) -> bool:
    """Near-duplicate check ("Contractor" vs "Contractors", "plumber" vs "Plumber").

    Case-insensitive: either name, minus one trailing ``s``, is contained
    in the other.  Identical strings are duplicates, not similar.
    """
    if existing == candidate:
        return False
    existing_stem, candidate_stem = _stem(existing), _stem(candidate)
    if not existing_stem or not candidate_stem:
        return False
    return candidate_stem in existing.lower() or existing_stem in candidate.lower()


def find_similar(categories: Iterable[str], candidate: str) -> Tuple[str, ...]:
    return tuple(name for name in categories if is_similar(name, candidate))


def add_service(
    category_set: ServiceCategorySet,
    new_category: str,
    accept_similar: bool = False,
) -> Union[ServiceCategorySet, SimilarCategoryWarning]:
    """Return a new set with ``new_category`` added.

    Raises ``DuplicateCategory`` if the category is already listed (as
    primary or additional).  Returns a :class:`SimilarCategoryWarning`
    instead of a set when the category resembles a listed one and
    ``accept_similar`` is false.
    """
    category_set.validate()
    category = normalize_category(new_category)
    if category in category_set:
        raise DuplicateCategory(category)
    if not accept_similar:
        similar = find_similar(category_set.all_categories(), category)
        if similar:
            return SimilarCategoryWarning(candidate=category, similar_to=similar)
    return ServiceCategorySet(category_set.primary, category_set.additional | {category})


def remove_service(category_set: ServiceCategorySet, category: str) -> ServiceCategorySet:
    """Return a new set without ``category``.

    The primary category is permanent: removing it raises
    ``CannotRemovePrimary`` whatever else the set contains.
    """
    category_set.validate()
    name = normalize_category(category)
    if name == category_set.primary:
        raise CannotRemovePrimary(name)
    if name not in category_set.additional:
        raise CategoryNotFound(name)
    return ServiceCategorySet(category_set.primary, category_set.additional - {name})
