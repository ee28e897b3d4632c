"""
PRD feature - route modules.

- crud (list/create/read/update/delete, RICE rows)
- export (markdown, html, csv, share links)
"""
