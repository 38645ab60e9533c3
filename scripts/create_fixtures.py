"""Create a demonstration home folder for `homeshift scan`.

Usage: python scripts/create_fixtures.py <root_dir>

Creates entries covering every naming rule:
  - report#card%2024.pdf     (illegal characters, auto-fixable)
  - Q1#Reports/notes%.txt    (illegal characters in a folder and its child)
  - desktop.ini              (reserved name, manual fix)
  - _vti_cnf/                (reserved string, manual fix)
  - a#b.txt + a-b.txt        (auto-fix collides with an existing name)
  - clean/plan.docx          (no violations)

Names longer than 400 characters cannot be created on most local
filesystems, so that rule is only exercised by the unit tests.
"""

from __future__ import annotations

import os
import sys

FIXTURES = [
    "report#card%2024.pdf",
    "Q1#Reports/notes%.txt",
    "desktop.ini",
    "_vti_cnf/page.htm",
    "a#b.txt",
    "a-b.txt",
    "clean/plan.docx",
]


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python create_fixtures.py <root_dir>", file=sys.stderr)
        sys.exit(1)

    root = os.path.abspath(sys.argv[1])
    os.makedirs(root, exist_ok=True)

    for rel in FIXTURES:
        path = os.path.join(root, *rel.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write("homeshift fixture")
        print(f"  created: {rel}")

    count = sum(len(files) + len(dirs) for _, dirs, files in os.walk(root))
    print(f"  root contains {count} entries")


if __name__ == "__main__":
    main()
