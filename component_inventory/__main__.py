"""
Точка входа для запуска модуля.

Позволяет запускать утилиту как:
    python -m component_inventory [команда] [опции]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
