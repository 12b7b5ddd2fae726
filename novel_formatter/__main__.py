from __future__ import annotations

from novel_formatter.cli import main

raise SystemExit(main())
