# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Periodic index arithmetic on 0-based indices.

With n = 10: incmod(9, n) == 0 and decmod(0, n) == 9.
"""

from numba import njit


@njit(cache=True)
def incmod(a, n):
    return 0 if a == n - 1 else a + 1


@njit(cache=True)
def decmod(a, n):
    return n - 1 if a == 0 else a - 1
