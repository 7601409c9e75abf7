import pytest

from xodrgeom.profile.core import (
    CubicPoly,
    CubicProfile,
    Crossfall,
    HeightOffset,
    Side,
    StepFunction,
)


def test_empty_profile_evaluates_to_zero():
    profile = CubicProfile()

    for s in (-10.0, 0.0, 3.5, 1e6):
        assert profile.get(s) == 0.0
        assert profile.get_grad(s) == 0.0


def test_profile_uses_nearest_preceding_key_and_local_parameter():
    profile = CubicProfile(
        {
            10.0: CubicPoly(5.0, 0.0, 1.0, 0.0),
            0.0: CubicPoly(1.0, 2.0, 0.0, 0.0),
        }
    )

    assert profile.keys() == [0.0, 10.0]
    assert profile.get(5.0) == pytest.approx(11.0)
    assert profile.get(10.0) == pytest.approx(5.0)
    assert profile.get(12.0) == pytest.approx(9.0)
    assert profile.get_grad(12.0) == pytest.approx(4.0)
    # before the first key the first polynomial is extended
    assert profile.get(-1.0) == pytest.approx(-1.0)


def test_profile_is_a_step_function_without_continuity():
    profile = CubicProfile([(0.0, CubicPoly(1.0)), (5.0, CubicPoly(3.0))])

    assert profile.get(4.999999) == 1.0
    assert profile.get(5.0) == 3.0


def test_constant_profile():
    profile = CubicProfile.constant(0.25, s0=2.0)
    assert profile.get(100.0) == 0.25


def test_step_function_rejects_non_increasing_keys():
    with pytest.raises(ValueError):
        StepFunction([(1.0, "a"), (1.0, "b")])
    with pytest.raises(ValueError):
        StepFunction([(2.0, "a"), (1.0, "b")])
    with pytest.raises(ValueError):
        StepFunction([(float("nan"), "a")])


def test_step_function_lookup_helpers():
    steps = StepFunction([(0.0, "a"), (10.0, "b"), (20.0, "c")])

    assert steps.find(15.0) == (10.0, "b")
    assert steps.find_with_next(15.0) == ((10.0, "b"), (20.0, "c"))
    assert steps.find_with_next(25.0) == ((20.0, "c"), None)
    assert steps.key_after(10.0) == 20.0
    assert steps.key_after(20.0) is None
    assert StepFunction().find(1.0) is None
    assert not StepFunction()


def test_cubic_poly_evaluation():
    poly = CubicPoly(1.0, -2.0, 0.5, 0.25)

    assert poly.get(2.0) == pytest.approx(1.0 - 4.0 + 2.0 + 2.0)
    assert poly.get_grad(2.0) == pytest.approx(-2.0 + 2.0 + 3.0)


@pytest.fixture
def one_sided_crossfall():
    return Crossfall(
        {0.0: CubicPoly(0.1), 50.0: CubicPoly(0.2), 80.0: CubicPoly(0.3)},
        sides={0.0: Side.RIGHT, 50.0: Side.LEFT},
    )


@pytest.mark.parametrize("s", [0.0, 10.0, 49.9])
def test_crossfall_right_interval_is_zero_on_left_side(one_sided_crossfall, s):
    assert one_sided_crossfall.get_crossfall(s, True) == 0.0
    assert one_sided_crossfall.get_crossfall(s, False) == pytest.approx(0.1)


@pytest.mark.parametrize("s", [50.0, 60.0, 79.9])
def test_crossfall_left_interval_is_zero_on_right_side(one_sided_crossfall, s):
    assert one_sided_crossfall.get_crossfall(s, False) == 0.0
    assert one_sided_crossfall.get_crossfall(s, True) == pytest.approx(0.2)


def test_crossfall_without_side_applies_to_both(one_sided_crossfall):
    assert one_sided_crossfall.get_side(90.0) is Side.BOTH
    assert one_sided_crossfall.get_crossfall(90.0, True) == pytest.approx(0.3)
    assert one_sided_crossfall.get_crossfall(90.0, False) == pytest.approx(0.3)


def test_empty_crossfall_is_zero():
    crossfall = Crossfall()
    assert crossfall.get_crossfall(10.0, True) == 0.0
    assert crossfall.get_side(10.0) is Side.BOTH


def test_crossfall_side_for_unknown_key_is_rejected():
    with pytest.raises(ValueError):
        Crossfall({0.0: CubicPoly(0.1)}, sides={5.0: Side.LEFT})


def test_crossfall_accepts_side_values():
    crossfall = Crossfall({0.0: CubicPoly(0.1)}, sides={0.0: "left"})
    assert crossfall.get_side(1.0) is Side.LEFT


def test_height_offset_defaults():
    assert HeightOffset() == HeightOffset(inner=0.0, outer=0.0)
