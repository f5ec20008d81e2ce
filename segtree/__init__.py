import os

__TITLE__ = 'segtree'
__VERSION__ = 'v0.1.0'
__DESCRIPTION__ = 'Array-backed segment tree with point update and range aggregation'
__AUTHOR__ = "segtree Contributors"
__AUTHOR_EMAIL__ = "segtree@users.noreply.github.com"
__version__ = __VERSION__

enable_numba = os.environ.get('SEGTREE_ENABLE_NUMBA', 'true').lower() == 'true'
