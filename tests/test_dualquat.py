"""Tests for the dual quaternion values."""

import numpy as np
import pytest

from dqkin import DQ, E_, Ad, i_, j_, k_, rotation_quaternion


class TestProducts:
    def test_quaternion_units(self):
        assert i_ * j_ == k_
        assert j_ * i_ == -k_
        assert k_ * k_ == DQ(-1.0)

    def test_dual_unit_is_nilpotent(self):
        assert E_ * E_ == DQ(0.0)

    def test_hamilton_operators_agree_with_product(self):
        a = DQ([0.1, -0.4, 0.3, 0.9, 0.2, 0.0, -0.6, 0.5])
        b = DQ([0.7, 0.2, -0.1, 0.3, -0.3, 0.8, 0.1, 0.4])
        np.testing.assert_allclose(a.hamiplus8() @ b.vec8(), (a * b).vec8())
        np.testing.assert_allclose(b.haminus8() @ a.vec8(), (a * b).vec8())
        np.testing.assert_allclose(a.P().hamiplus4() @ b.vec4(), (a.P() * b.P()).vec4())
        np.testing.assert_allclose(b.P().haminus4() @ a.vec4(), (a.P() * b.P()).vec4())

    def test_numpy_scalars(self):
        assert np.float64(2.0) * i_ == DQ([0.0, 2.0])
        assert i_ * np.float64(2.0) == DQ([0.0, 2.0])

    def test_too_many_coefficients(self):
        with pytest.raises(ValueError):
            DQ(np.ones(9))


class TestPose:
    def test_translation_round_trip(self):
        x = DQ.from_pose(rotation_quaternion(0.3, [0.0, 0.0, 1.0]), [1.0, 2.0, 3.0])
        np.testing.assert_allclose(x.translation_vector(), [1.0, 2.0, 3.0])
        assert x.is_unit()

    def test_unit_norm(self):
        x = DQ.from_pose(rotation_quaternion(1.2, [1.0, 1.0, 0.0]), [0.5, -0.1, 0.2])
        np.testing.assert_allclose(x.norm().vec8(), DQ(1.0).vec8(), atol=1e-12)
        np.testing.assert_allclose((x * x.conj()).vec8(), DQ(1.0).vec8(), atol=1e-12)

    def test_adjoint_rotates_vectors(self):
        r = rotation_quaternion(np.pi / 2, [0.0, 0.0, 1.0])
        assert Ad(r, i_).isclose(j_)

    def test_normalize(self):
        x = DQ.from_pose(rotation_quaternion(0.4, [0.0, 1.0, 0.0]), [0.3, 0.0, 0.0])
        y = (2.0 * x).normalize()
        assert y.isclose(x)

    def test_values_are_read_only(self):
        x = DQ(1.0)
        v = x.vec8()
        v[0] = 5.0
        assert x == DQ(1.0)
