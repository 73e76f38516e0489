"""Allow running as: python -m eos_osc_lib"""

from .cli import main

raise SystemExit(main())
