"""Unit tests for saturating color arithmetic.

Tests cover:
- Construction clamping and hex packing
- Saturating addition and scalar multiplication on the host
- Kernel-side color_add, color_scale and pack_color agreeing with the host
"""

import pytest
import taichi as ti


class TestColorHost:
    """Tests for the immutable Color value type."""

    def test_construction_clamps_channels(self):
        from diorama.core.color import Color

        color = Color(-10, 128, 300)
        assert color.as_tuple() == (0, 128, 255)

    def test_hex_roundtrip(self):
        from diorama.core.color import Color

        color = Color.from_hex(0x091437)
        assert color == Color(9, 20, 55)
        assert color.to_hex() == 0x091437

    def test_add_saturates(self):
        from diorama.core.color import Color

        assert Color(200, 10, 0) + Color(100, 10, 0) == Color(255, 20, 0)
        assert Color(255, 255, 255) + Color(255, 255, 255) == Color(255, 255, 255)

    def test_scale_by_zero_is_black(self):
        from diorama.core.color import Color

        assert Color(120, 200, 255) * 0.0 == Color(0, 0, 0)

    def test_scale_negative_clamps_to_zero(self):
        from diorama.core.color import Color

        assert Color(120, 200, 255) * -2.5 == Color(0, 0, 0)

    def test_scale_truncates_and_saturates(self):
        from diorama.core.color import Color

        assert Color(101, 62, 4) * 0.6 == Color(60, 37, 2)
        assert Color(228, 246, 255) * 1.5 == Color(255, 255, 255)
        assert 0.5 * Color(100, 100, 100) == Color(50, 50, 50)

    def test_mul_by_non_number_is_unsupported(self):
        from diorama.core.color import Color

        with pytest.raises(TypeError):
            Color(1, 2, 3) * "2"

    def test_frozen(self):
        from dataclasses import FrozenInstanceError

        from diorama.core.color import Color

        color = Color(1, 2, 3)
        with pytest.raises(FrozenInstanceError):
            color.r = 10

    def test_str(self):
        from diorama.core.color import Color

        assert str(Color(1, 2, 3)) == "Color(r: 1, g: 2, b: 3)"


class TestColorKernel:
    """Tests for the kernel-side color helpers."""

    def test_color_add_saturates(self):
        from diorama.core.color import color_add, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = color_add(vec3(200.0, 10.0, 0.0), vec3(100.0, 10.0, 0.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == (255.0, 20.0, 0.0)

    def test_color_scale_matches_host(self):
        from diorama.core.color import Color, color_from_vec, color_scale, make_color

        source = Color(101, 62, 4)
        color_field = ti.field(dtype=ti.math.vec3, shape=())
        result = ti.field(dtype=ti.math.vec3, shape=())
        color_field[None] = make_color(source)

        @ti.kernel
        def test_kernel(scalar: ti.f32):
            result[None] = color_scale(color_field[None], scalar)

        for scalar in (0.0, 0.6, 1.7, -1.0, 5.0):
            test_kernel(scalar)
            assert color_from_vec(result[None]) == source * scalar

    def test_pack_color(self):
        from diorama.core.color import pack_color, vec3

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = pack_color(vec3(9.0, 20.0, 55.0))

        test_kernel()
        assert result[None] == 0x091437
