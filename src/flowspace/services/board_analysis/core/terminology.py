"""
Terminology consistency checking across node labels.
"""

import re
from typing import Dict, List, Sequence, Tuple

from ....shared import get_logger
from ....shared.models.board import BoardGraph, Element
from ..models import SEVERITY_RULES, Diagnostic, DiagnosticType

logger = get_logger(__name__)

MIN_WORD_LENGTH = 4

ABBREVIATION_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("user", "usr"),
    ("database", "db"),
    ("authentication", "auth"),
    ("configuration", "config"),
    ("information", "info"),
    ("application", "app"),
)

_NON_WORD = re.compile(r'[^\w\s]')


def normalize_term(word: str) -> str:
    """Lowercase and strip one trailing ``s``, then ``ing``, then ``ed``."""
    stem = word.lower()
    for suffix in ("s", "ing", "ed"):
        if stem.endswith(suffix):
            stem = stem[:-len(suffix)]
    return stem


def _words(label: str) -> List[str]:
    return _NON_WORD.sub(' ', label).split()


class _StemGroup:
    """Surface forms of one stem, in first-seen order, with their elements."""

    def __init__(self):
        self.forms: Dict[str, List[str]] = {}

    def add(self, form: str, element_id: str):
        ids = self.forms.setdefault(form, [])
        if element_id not in ids:
            ids.append(element_id)

    def element_ids(self, forms: Sequence[str]) -> List[str]:
        return list(dict.fromkeys(i for form in forms for i in self.forms[form]))


def check_terminology(board: BoardGraph) -> List[Diagnostic]:
    """
    Flag inconsistent vocabulary across labels.

    Words longer than three characters are grouped by stem, keeping their
    original casing. A multi-word label whose collapsed form matches an
    existing stem (``Log In`` and ``login``) joins that group as one form.
    Within a group, forms that differ only by case yield a case
    inconsistency; more than one case-insensitive form yields a terminology
    inconsistency suggesting the first-seen form. Mixed use of a full term
    and its abbreviation is flagged separately.

    Args:
        board: Canonical board graph

    Returns:
        Terminology diagnostics
    """
    labeled: List[Element] = [n for n in board.nodes if n.has_text]
    groups: Dict[str, _StemGroup] = {}

    for node in labeled:
        for word in _words(node.text):
            if len(word) >= MIN_WORD_LENGTH:
                groups.setdefault(normalize_term(word), _StemGroup()).add(word, node.id)

    for node in labeled:
        words = _words(node.text)
        if len(words) < 2:
            continue
        stem = normalize_term("".join(words))
        if stem in groups:
            groups[stem].add(" ".join(words), node.id)

    issues: List[Diagnostic] = []
    for stem, group in groups.items():
        buckets: Dict[str, List[str]] = {}
        for form in group.forms:
            buckets.setdefault(form.lower(), []).append(form)

        if len(buckets) > 1:
            variations = list(group.forms)
            issues.append(_issue(
                DiagnosticType.TERMINOLOGY_INCONSISTENCY,
                f"Inconsistent terminology: {', '.join(variations)}",
                element_ids=group.element_ids(variations),
                payload={
                    "term": stem,
                    "variations": variations,
                    "suggestion": f'Standardize to one term: "{variations[0]}"',
                },
            ))

        for forms in buckets.values():
            if len(forms) < 2:
                continue
            issues.append(_issue(
                DiagnosticType.CASE_INCONSISTENCY,
                f"Inconsistent capitalization: {', '.join(forms)}",
                element_ids=group.element_ids(forms),
                payload={
                    "term": stem,
                    "variations": forms,
                    "suggestion": f'Use consistent capitalization: "{forms[0]}"',
                },
            ))

    issues.extend(_check_abbreviations(labeled))
    logger.debug(f"Terminology check found {len(issues)} issues")
    return issues


def _check_abbreviations(labeled: Sequence[Element]) -> List[Diagnostic]:
    usage: Dict[str, List[str]] = {}
    for node in labeled:
        for word in _words(node.text):
            for term in {word.lower(), normalize_term(word)}:
                ids = usage.setdefault(term, [])
                if node.id not in ids:
                    ids.append(node.id)

    issues = []
    for full, abbr in ABBREVIATION_PAIRS:
        if full not in usage or abbr not in usage:
            continue
        issues.append(_issue(
            DiagnosticType.ABBREVIATION_INCONSISTENCY,
            f'Mixed use of "{full}" and "{abbr}"',
            element_ids=list(dict.fromkeys(usage[full] + usage[abbr])),
            payload={
                "terms": [full, abbr],
                "suggestion": f'Use either full term "{full}" or abbreviation "{abbr}" consistently',
            },
        ))
    return issues


def _issue(diagnostic_type: DiagnosticType, message: str, **fields) -> Diagnostic:
    return Diagnostic(
        type=diagnostic_type,
        code=diagnostic_type.value,
        severity=SEVERITY_RULES[diagnostic_type.value],
        message=message,
        **fields,
    )
