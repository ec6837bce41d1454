"""
Taxonomy dropdown data.

Built from the term tab (columns Batch, Term, Domain, Subject; row 0 is the
header) on every call. A row contributes a term only when it names a batch,
a domain only with a term and a subject only with a domain. Every list ends
with the reserved ``Other`` choice.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from ...config import settings
from ..models.resource_models import OTHER_OPTION, ResourceLevel, ResourceType, TaxonomyHierarchy, TaxonomyIndex
from ..records.row_schema import cell_text
from ..records.tabular_store import TabularStore

logger = logging.getLogger("portal_resources.taxonomy")

TERM_HEADER = ["Batch", "Term", "Domain", "Subject"]
SESSION_COUNT = 100


def with_other(values: Iterable[str]) -> List[str]:
    """Sorted, de-duplicated choices followed by the reserved ``Other`` choice."""
    return sorted(set(values) - {OTHER_OPTION}) + [OTHER_OPTION]


def session_names(count: int = SESSION_COUNT) -> List[str]:
    return [f"Session {n}" for n in range(1, count + 1)]


class TaxonomyIndexBuilder:
    """Reads the term tab and folds it into flat lists plus parent -> children maps."""

    def __init__(self, tabular_store: TabularStore, term_sheet_name: Optional[str] = None):
        self.tabular_store = tabular_store
        self.term_sheet_name = term_sheet_name or settings.term_sheet_name

    def build(self) -> TaxonomyIndex:
        rows = self.tabular_store.read_all_rows(self.term_sheet_name)

        batches: Set[str] = set()
        terms: Set[str] = set()
        domains: Set[str] = set()
        subjects: Set[str] = set()
        batch_terms: Dict[str, Set[str]] = defaultdict(set)
        term_domains: Dict[str, Set[str]] = defaultdict(set)
        domain_subjects: Dict[str, Set[str]] = defaultdict(set)

        for row in rows[1:]:
            cells = [cell_text(value).strip() for value in list(row)[:4]]
            cells.extend([""] * (4 - len(cells)))
            batch, term, domain, subject = cells

            if not batch:
                continue
            batches.add(batch)
            if not term:
                continue
            terms.add(term)
            batch_terms[batch].add(term)
            if not domain:
                continue
            domains.add(domain)
            term_domains[f"{batch}|{term}"].add(domain)
            if not subject:
                continue
            subjects.add(subject)
            domain_subjects[f"{batch}|{term}|{domain}"].add(subject)

        hierarchy = TaxonomyHierarchy(
            batches={key: with_other(values) for key, values in batch_terms.items()},
            terms={key: with_other(values) for key, values in term_domains.items()},
            domains={key: with_other(values) for key, values in domain_subjects.items()},
        )
        index = TaxonomyIndex(
            batches=with_other(batches),
            terms=with_other(terms),
            domains=with_other(domains),
            subjects=with_other(subjects),
            sessions=session_names() + [OTHER_OPTION],
            resource_types=[member.value for member in ResourceType],
            resource_levels=[member.value for member in ResourceLevel],
            hierarchy=hierarchy,
        )
        logger.info(
            f"Taxonomy loaded: {len(batches)} batches, {len(terms)} terms, "
            f"{len(domains)} domains, {len(subjects)} subjects"
        )
        return index
