"""
Films module.

- Public list/detail reads (by slug or id)
- Create/update for content roles; delete for admins
- Slug-based mutation routes answer 405
"""
