"""
Decision history.

Responsibilities:
- Record what each user decided on, with the filters that produced it.
- Let users rate and comment on past decisions, or delete them.
- Count how often each catalog item was chosen.
"""
