"""Moderation and content lifecycle.

- ``workflow``: resource submissions, pending -> approved | rejected
- ``flags``: user reports and their review
- ``bulk``: one action over many items with per-item outcomes
- ``action_log``: append-only audit trail of decisions
- ``rules``: advisory keyword rules
- ``posts``: community board moderation
"""
