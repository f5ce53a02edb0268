from __future__ import annotations

"""cli.ui

Terminal interaction helpers: numbered menus, yes/no prompts and plain-text
tables. Nothing here talks to SonarQube.
"""

from typing import Dict, List, Sequence


def choose_from_menu(title: str, options: Dict[str, str]) -> str:
    """Show a 1..N menu of ``options`` (key -> label) and return the chosen key.

    'Z' exits the program.
    """
    if not options:
        raise SystemExit(f"Nothing to choose from: {title}")

    keys = list(options.keys())
    print("\n" + title)
    for idx, key in enumerate(keys, start=1):
        label = options[key]
        print(f"[{idx}] {label}" if label == key else f"[{idx}] {label} ({key})")

    while True:
        choice = input(f"Enter number (1-{len(keys)}) or Z to exit: ").strip()
        if choice.upper() == "Z":
            print("Exiting (Z selected).")
            raise SystemExit(0)
        if choice.isdigit() and 1 <= int(choice) <= len(keys):
            return keys[int(choice) - 1]
        print(f"Invalid choice. Please enter 1-{len(keys)} or Z.")


def prompt_yes_no(prompt: str, *, default: bool = False) -> bool:
    suffix = "Y/n" if default else "y/N"
    while True:
        raw = input(f"{prompt} ({suffix}): ").strip().lower()
        if not raw:
            return default
        if raw in {"y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please enter y or n.")


def format_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    """Left-aligned, space-padded table (header + dashes + rows)."""
    cells: List[List[str]] = [[str(h) for h in headers]] + [[str(c) for c in r] for r in rows]
    widths = [max(len(row[i]) for row in cells) for i in range(len(headers))]

    def _line(row: List[str]) -> str:
        return "  ".join(c.ljust(w) for c, w in zip(row, widths)).rstrip()

    out = [_line(cells[0]), _line(["-" * w for w in widths])]
    out.extend(_line(r) for r in cells[1:])
    return "\n".join(out)


def human_size(n_bytes: int) -> str:
    if n_bytes < 1024:
        return f"{n_bytes} B"
    if n_bytes < 1024 * 1024:
        return f"{n_bytes / 1024:.1f} KB"
    return f"{n_bytes / (1024 * 1024):.1f} MB"
