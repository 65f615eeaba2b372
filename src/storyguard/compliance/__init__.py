"""
Compliance screening for generated story scripts.

Usage:
    from storyguard.compliance import scan

    warnings = scan([{"id": 1, "text": "業界No.1の満足度！"}])
    payload = [w.to_dict() for w in warnings]
"""

from storyguard.compliance.matcher import Match, find_matches
from storyguard.compliance.rules import (
    RULES,
    Category,
    Rule,
    RuleTableError,
    Severity,
    build_rules,
    load_rules,
)
from storyguard.compliance.scanner import LegalWarning, Slide, scan, scan_slide

__all__ = [
    # Rule table
    "RULES",
    "Category",
    "Rule",
    "RuleTableError",
    "Severity",
    "build_rules",
    "load_rules",
    # Matching
    "Match",
    "find_matches",
    # Scanning
    "LegalWarning",
    "Slide",
    "scan",
    "scan_slide",
]
