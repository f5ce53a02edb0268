"""SonarQube integration modules.

Split into:
  - api.py   : all HTTP calls to SonarQube (one attempt per call)
  - rules.py : pure parsing of /api/rules/show into "how to fix" guidance
  - types.py : small shared data structures

The report pipeline (pipeline/report/) is the orchestration layer.
"""
