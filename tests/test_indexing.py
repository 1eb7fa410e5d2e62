# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

from stagflow.operators.indexing import incmod, decmod


def test_incmod_wraps_last_index():
    assert incmod(9, 10) == 0
    assert incmod(0, 10) == 1
    assert incmod(8, 10) == 9


def test_decmod_wraps_first_index():
    assert decmod(0, 10) == 9
    assert decmod(9, 10) == 8
    assert decmod(1, 10) == 0


def test_incmod_decmod_inverse():
    n = 7
    for a in range(n):
        assert decmod(incmod(a, n), n) == a
        assert incmod(decmod(a, n), n) == a


def test_two_point_axis():
    assert incmod(0, 2) == 1 and incmod(1, 2) == 0
    assert decmod(0, 2) == 1 and decmod(1, 2) == 0
