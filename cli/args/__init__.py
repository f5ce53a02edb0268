"""CLI argument builder modules.

The top-level :mod:`report_cli` stays thin: each sub-command registers its
flags through a small "arg builder" function housed here.

- :func:`cli.args.base.add_global_args`
- :func:`cli.args.generate.add_generate_args`
- :func:`cli.args.browse.add_browse_args`
- :func:`cli.args.history.add_history_args`
"""

from __future__ import annotations

__all__ = [
    "base",
    "generate",
    "browse",
    "history",
]
