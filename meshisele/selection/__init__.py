"""
Candidate selection.

Responsibilities:
- Evaluate filter predicates against a single catalog item.
- Relax filters in a fixed order when a stricter pass yields nothing.
- Fall back to the static catalog when the primary source is unavailable.
- Pick one surviving candidate uniformly at random.
"""
