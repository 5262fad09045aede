"""
Точка входа для запуска модуля.

Позволяет запускать утилиту как:
    python -m topology_collector [команда] [опции]

Примеры:
    python -m topology_collector devices list
    python -m topology_collector collect SW-CORE-01
    python -m topology_collector topology --layout
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
