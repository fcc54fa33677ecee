"""Tests for serial manipulator forward and differential kinematics."""

import numpy as np
import pytest

from dqkin import (
    DQ,
    DimensionMismatch,
    E_,
    FKOptions,
    IndexOutOfRange,
    JointType,
    SerialManipulator,
    SerialManipulatorDH,
    SerialManipulatorMDH,
    SerialRobotConfig,
    fk,
    i_,
    j_,
    k_,
    numerical_jacobian,
    rotation_quaternion,
)


def _dh_matrix(theta, d, a, alpha):
    ca, sa = np.cos(alpha), np.sin(alpha)
    ct, st = np.cos(theta), np.sin(theta)
    return np.array(
        [
            [ct, -st * ca, st * sa, a * ct],
            [st, ct * ca, -ct * sa, a * st],
            [0.0, sa, ca, d],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def _mdh_matrix(theta, d, a, alpha):
    ca, sa = np.cos(alpha), np.sin(alpha)
    ct, st = np.cos(theta), np.sin(theta)
    return np.array(
        [
            [ct, -st, 0.0, a],
            [st * ca, ct * ca, -sa, -sa * d],
            [st * sa, ct * sa, ca, ca * d],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def _chain_matrix(table, q, link_matrix):
    T = np.eye(4)
    for i in range(table.shape[1]):
        theta, d, a, alpha, type_ = table[:, i]
        if type_ == JointType.REVOLUTE:
            theta += q[i]
        else:
            d += q[i]
        T = T @ link_matrix(theta, d, a, alpha)
    return T


def _assert_pose_matches(x, T):
    np.testing.assert_allclose(x.translation_vector(), T[:3, 3], atol=1e-12)
    r = x.P()
    for col, axis in enumerate((i_, j_, k_)):
        np.testing.assert_allclose((r * axis * r.conj()).vec4()[1:], T[:3, col], atol=1e-12)


def _central_difference(fun, q, q_dot, dt=1e-6):
    return (fun(q + q_dot * dt) - fun(q - q_dot * dt)) / (2.0 * dt)


class TestLinkTransform:
    @pytest.mark.parametrize("cls", [SerialManipulatorDH, SerialManipulatorMDH])
    def test_zero_link_is_identity(self, cls):
        robot = cls(np.array([[0.0], [0.0], [0.0], [0.0], [JointType.REVOLUTE]]))
        assert robot.get_link2dq(0.0, 1) == DQ(1.0)

    def test_links_are_unit(self, mdh_robot, dh_robot, q):
        for robot in (mdh_robot, dh_robot):
            for i in range(1, robot.get_dim_configuration_space() + 1):
                assert robot.get_link2dq(q[i - 1], i).is_unit()

    def test_mdh_revolute_round_trip(self, mdh_robot):
        angle = 0.73
        z = [0.0, 0.0, 1.0]
        moved = mdh_robot.get_link2dq(angle, 1) * rotation_quaternion(-angle, z)
        assert moved.isclose(mdh_robot.get_link2dq(0.0, 1))

    def test_dh_revolute_round_trip(self, dh_robot):
        angle = -1.1
        z = [0.0, 0.0, 1.0]
        moved = rotation_quaternion(-angle, z) * dh_robot.get_link2dq(angle, 3)
        assert moved.isclose(dh_robot.get_link2dq(0.0, 3))

    def test_prismatic_translation(self):
        robot = SerialManipulatorMDH(np.array([[0.0], [0.0], [0.0], [0.0], [JointType.PRISMATIC]]))
        np.testing.assert_allclose(robot.fkm([0.5]).translation_vector(), [0.0, 0.0, 0.5])

    @pytest.mark.parametrize("ith", [0, 6])
    def test_link_index_out_of_range(self, mdh_robot, ith):
        with pytest.raises(IndexOutOfRange):
            mdh_robot.get_link2dq(0.0, ith)


class TestMotionGenerator:
    def test_dh_generators(self, dh_robot):
        assert dh_robot.get_w(1) == k_
        assert dh_robot.get_w(2) == E_ * k_

    def test_mdh_generator_without_twist(self):
        table = np.array([[0.0, 0.0], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0], [1, 2]])
        robot = SerialManipulatorMDH(table)
        assert robot.get_w(1).isclose(k_)
        assert robot.get_w(2).isclose(E_ * k_)

    def test_mdh_revolute_generator_is_joint_axis(self):
        alpha, a = 0.6, 0.25
        table = np.array([[0.0], [0.0], [a], [alpha], [1]])
        robot = SerialManipulatorMDH(table)
        # Rx(alpha) Tx(a) applied to the z axis line
        frame = rotation_quaternion(alpha, [1.0, 0.0, 0.0]) + 0.5 * E_ * (a * i_) * rotation_quaternion(
            alpha, [1.0, 0.0, 0.0]
        )
        expected = frame * k_ * frame.conj()
        assert robot.get_w(1).isclose(expected)

    def test_supported_joint_types(self):
        assert SerialManipulator.get_supported_joint_types() == (JointType.REVOLUTE, JointType.PRISMATIC)


class TestForwardKinematics:
    def test_fkm_composes_base_and_effector(self, mdh_robot, dh_robot, q):
        for robot in (mdh_robot, dh_robot):
            assert robot.fkm(q) == robot.base_frame * robot.raw_fkm(q) * robot.effector

    def test_explicit_full_bound(self, mdh_robot, q):
        assert mdh_robot.fkm(q, 5) == mdh_robot.fkm(q)

    def test_prefix_skips_effector(self, mdh_robot, q):
        expected = mdh_robot.base_frame * mdh_robot.raw_fkm(q, 3)
        assert mdh_robot.fkm(q, 3) == expected
        assert mdh_robot.fkm(q[:3], 3) == expected

    def test_zero_links_is_base(self, mdh_robot, q):
        assert mdh_robot.fkm(q, 0) == mdh_robot.base_frame

    def test_dh_matches_homogeneous_transforms(self, dh_robot, mixed_table, q):
        _assert_pose_matches(dh_robot.raw_fkm(q), _chain_matrix(mixed_table, q, _dh_matrix))

    def test_mdh_matches_homogeneous_transforms(self, mdh_robot, mixed_table, q):
        _assert_pose_matches(mdh_robot.raw_fkm(q), _chain_matrix(mixed_table, q, _mdh_matrix))

    def test_set_base_frame(self, mdh_robot, q):
        new_base = DQ.from_pose(rotation_quaternion(1.0, [0.0, 0.0, 1.0]), [1.0, 0.0, 0.0])
        mdh_robot.set_base_frame(new_base)
        assert mdh_robot.base_frame == new_base
        assert mdh_robot.fkm(q) == new_base * mdh_robot.raw_fkm(q) * mdh_robot.effector

    def test_set_effector(self, mdh_robot, q):
        mdh_robot.set_effector(DQ(1.0))
        assert mdh_robot.fkm(q).isclose(mdh_robot.base_frame * mdh_robot.raw_fkm(q))

    @pytest.mark.parametrize("size", [4, 6])
    def test_wrong_length(self, mdh_robot, size):
        with pytest.raises(DimensionMismatch):
            mdh_robot.fkm(np.zeros(size))

    def test_prefix_too_short(self, mdh_robot):
        with pytest.raises(DimensionMismatch):
            mdh_robot.fkm(np.zeros(2), 3)

    def test_prefix_out_of_range(self, mdh_robot, q):
        with pytest.raises(IndexOutOfRange):
            mdh_robot.fkm(q, 6)

    def test_matrix_is_not_a_configuration(self, mdh_robot):
        with pytest.raises(DimensionMismatch):
            mdh_robot.fkm(np.zeros((5, 1)))


class TestPoseJacobian:
    def test_matches_finite_differences(self, mdh_robot, dh_robot, q):
        for robot in (mdh_robot, dh_robot):
            J = robot.pose_jacobian(q)
            J_num = numerical_jacobian(lambda qq: robot.fkm(qq).vec8(), q)
            assert J.shape == (8, 5)
            np.testing.assert_allclose(J, J_num, atol=1e-5)

    def test_prefix_matches_finite_differences(self, mdh_robot, q):
        J = mdh_robot.pose_jacobian(q[:3], 3)
        J_num = numerical_jacobian(lambda qq: mdh_robot.fkm(qq, 3).vec8(), q[:3])
        assert J.shape == (8, 3)
        np.testing.assert_allclose(J, J_num, atol=1e-5)

    def test_raw_jacobian_ignores_frames(self, mdh_robot, q):
        J = mdh_robot.raw_pose_jacobian(q)
        J_num = numerical_jacobian(lambda qq: mdh_robot.raw_fkm(qq).vec8(), q)
        np.testing.assert_allclose(J, J_num, atol=1e-5)

    def test_wrong_length(self, mdh_robot):
        with pytest.raises(DimensionMismatch):
            mdh_robot.pose_jacobian(np.zeros(4))


class TestPoseJacobianDerivative:
    def test_matches_finite_differences(self, mdh_robot, dh_robot, q, q_dot):
        for robot in (mdh_robot, dh_robot):
            J_dot = robot.pose_jacobian_derivative(q, q_dot)
            J_num = _central_difference(robot.pose_jacobian, q, q_dot)
            np.testing.assert_allclose(J_dot, J_num, atol=1e-4)

    @pytest.mark.parametrize("n_links", [2, 3, 4])
    def test_shorter_chains(self, mixed_table, q, q_dot, n_links):
        robot = SerialManipulatorMDH(mixed_table[:, :n_links])
        J_dot = robot.pose_jacobian_derivative(q[:n_links], q_dot[:n_links])
        J_num = _central_difference(robot.pose_jacobian, q[:n_links], q_dot[:n_links])
        np.testing.assert_allclose(J_dot, J_num, atol=1e-4)

    @pytest.mark.parametrize("robot_cls", [SerialManipulatorMDH, SerialManipulatorDH])
    def test_six_link_mixed_chain(self, mixed_table, robot_cls):
        extra = np.array([[0.25], [0.06], [0.12], [-0.6], [JointType.PRISMATIC]])
        robot = robot_cls(np.hstack([mixed_table, extra]))
        q = np.array([0.3, 0.12, -0.8, 1.1, 0.05, 0.09])
        q_dot = np.array([0.5, -0.2, 0.9, -0.4, 0.3, -0.7])
        J_dot = robot.pose_jacobian_derivative(q, q_dot)
        J_num = _central_difference(robot.pose_jacobian, q, q_dot)
        assert J_dot.shape == (8, 6)
        np.testing.assert_allclose(J_dot, J_num, atol=1e-4)

    def test_prefix_matches_finite_differences(self, dh_robot, q, q_dot):
        J_dot = dh_robot.pose_jacobian_derivative(q, q_dot, 2)
        J_num = _central_difference(lambda qq: dh_robot.pose_jacobian(qq, 2), q, q_dot)
        assert J_dot.shape == (8, 2)
        np.testing.assert_allclose(J_dot, J_num, atol=1e-4)

    def test_zero_velocity(self, mdh_robot, q):
        np.testing.assert_allclose(mdh_robot.pose_jacobian_derivative(q, np.zeros(5)), np.zeros((8, 5)))

    def test_velocity_length_mismatch(self, mdh_robot, q):
        with pytest.raises(DimensionMismatch):
            mdh_robot.pose_jacobian_derivative(q, np.zeros(4))


class TestConfigAndHelpers:
    def test_from_config_picks_convention(self, mixed_table):
        robot = SerialManipulator.from_config(SerialRobotConfig(table=mixed_table, name="m", convention="MDH"))
        assert isinstance(robot, SerialManipulatorMDH)
        assert robot.name == "m"
        robot = SerialManipulatorMDH.from_config(SerialRobotConfig(table=mixed_table, name="d", convention="mdh"))
        assert isinstance(robot, SerialManipulatorMDH)

    def test_from_config_rejects_other_convention(self, mixed_table):
        with pytest.raises(ValueError):
            SerialManipulatorDH.from_config(SerialRobotConfig(table=mixed_table, name="d", convention="mdh"))
        with pytest.raises(ValueError):
            SerialManipulatorMDH.from_config(SerialRobotConfig(table=mixed_table, name="m", convention="dh"))

    def test_base_class_is_abstract(self, mixed_table):
        with pytest.raises(TypeError):
            SerialManipulator(mixed_table)

    def test_unknown_convention(self, mixed_table):
        with pytest.raises(ValueError):
            SerialManipulator.from_config(SerialRobotConfig(table=mixed_table, name="x", convention="poe"))

    def test_fk_options(self, mdh_robot, q):
        res = fk(mdh_robot, q)
        assert res.points.shape == (7, 3)
        assert res.jacobian is None
        np.testing.assert_allclose(res.points[-1], mdh_robot.fkm(q).translation_vector(), atol=1e-12)
        np.testing.assert_allclose(res.points[0], mdh_robot.base_frame.translation_vector(), atol=1e-12)

        res = fk(mdh_robot, q, FKOptions(with_base=False, with_tool=False, return_jacobian=True))
        assert len(res.poses) == 5
        assert res.jacobian.shape == (8, 5)

    def test_plot_returns_axes(self, mdh_robot, q):
        ax = mdh_robot.plot(q, color="tab:blue")
        assert mdh_robot.plot(q, ax=ax, joints=False) is ax
        assert len(ax.lines) == 2
