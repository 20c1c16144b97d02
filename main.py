"""
Точка входа: распределённый K-means над CSV-датасетом.

Все параметры и примеры — в ``python main.py --help``.
"""

import sys

from dkmeans.main import main

if __name__ == "__main__":
    sys.exit(main())
