import numpy as np
import pytest

from Particles import (
    ParticlePopulation,
    SnowField,
    build_populations,
    explosion_appearance,
    explosion_offsets,
    generate_rings,
    generate_snow,
    generate_star,
    generate_tree,
    make_rng,
    tree_gradient,
)
from Settings import PaletteConfig, SceneConfig

RADIUS = 4.5
HEIGHT = 12.0


def _tree_height_fraction(positions):
    # undo the vertical placement: y = h*H - H/2 + 0.4*H
    return (positions[:, 1] + HEIGHT / 2.0 - 0.4 * HEIGHT) / HEIGHT


def test_tree_arrays_are_index_aligned(rng):
    tree = generate_tree(500, rng, RADIUS, HEIGHT)
    assert tree.count == 500
    assert tree.positions.shape == (500, 3)
    assert tree.colors.shape == (500, 3)
    assert tree.directions.shape == (500, 3)
    assert tree.sizes.shape == (500,)
    assert tree.randomness.shape == (500,)
    buffers = tree.buffers()
    assert buffers["positions"].shape == (1500,)
    assert buffers["sizes"].shape == (500,)
    assert tree.item_sizes() == {"positions": 3, "colors": 3, "sizes": 1, "randomness": 1, "directions": 3}


def test_tree_points_lie_inside_the_cone(rng):
    tree = generate_tree(5000, rng, RADIUS, HEIGHT)
    h = _tree_height_fraction(tree.positions.astype(np.float64))
    assert np.all(h >= -1e-5) and np.all(h < 1.0 + 1e-5)
    radial = np.hypot(tree.positions[:, 0], tree.positions[:, 2])
    assert np.all(radial <= (1.0 - h) * RADIUS + 1e-4)


def test_tree_radial_density_is_area_uniform():
    rng = make_rng(7)
    tree = generate_tree(40000, rng, RADIUS, HEIGHT)
    pos = tree.positions.astype(np.float64)
    h = _tree_height_fraction(pos)
    max_r = (1.0 - h) * RADIUS
    keep = max_r > 0.05
    ratio = np.hypot(pos[keep, 0], pos[keep, 2]) / max_r[keep]

    # area-uniform: P(ratio < 0.5) = 0.25 (naive linear sampling would give 0.5)
    assert np.mean(ratio < 0.5) == pytest.approx(0.25, abs=0.02)
    counts, _ = np.histogram(ratio ** 2, bins=10, range=(0.0, 1.0))
    expected = keep.sum() / 10.0
    assert np.all(np.abs(counts - expected) < 0.1 * expected)


def test_explosion_directions_are_unit_and_outward(rng):
    tree = generate_tree(2000, rng, RADIUS, HEIGHT)
    lengths = np.linalg.norm(tree.directions, axis=1)
    assert np.allclose(lengths, 1.0, atol=1e-5)
    # jitter biases upward: (U - 0.1) has a positive mean
    assert tree.directions[:, 1].mean() > 0.0


def test_tree_colors_follow_the_gradient():
    palette = PaletteConfig()
    core, mid, outer = palette.rgb("tree_core"), palette.rgb("tree_mid"), palette.rgb("tree_outer")
    colors = tree_gradient(np.array([0.0, 0.2, 0.4, 1.0]), core, mid, outer)
    assert np.allclose(colors[0], core)
    assert np.allclose(colors[1], (np.array(core) + np.array(mid)) / 2.0)
    assert np.allclose(colors[2], mid)
    assert np.allclose(colors[3], outer)


def test_static_buffers_are_read_only(rng):
    tree = generate_tree(10, rng, RADIUS, HEIGHT)
    with pytest.raises(ValueError):
        tree.positions[0, 0] = 1.0
    snow = generate_snow(10, rng)
    snow.positions[0, 1] = 1.0
    with pytest.raises(ValueError):
        snow.speeds[0] = 1.0


def test_population_rejects_misaligned_arrays():
    with pytest.raises(ValueError):
        ParticlePopulation(name="bad", positions=np.zeros((3, 3)), sizes=np.zeros(2))


def test_explosion_offsets(rng):
    tree = generate_tree(200, rng, RADIUS, HEIGHT)
    assert np.allclose(explosion_offsets(tree, 0.0), 0.0)

    full = explosion_offsets(tree, 1.0)
    # the swirl rotates around Y, so horizontal length is preserved
    horizontal = np.hypot(full[:, 0], full[:, 2])
    expected = 25.0 * np.hypot(tree.directions[:, 0], tree.directions[:, 2])
    assert np.allclose(horizontal, expected, atol=1e-3)
    assert np.allclose(full[:, 1], 25.0 * tree.directions[:, 1] + 5.0 * tree.randomness, atol=1e-3)

    assert explosion_appearance(0.0) == pytest.approx((1.0, 1.0))
    assert explosion_appearance(1.0) == pytest.approx((0.6, 0.7))


def test_rings_sit_on_two_annuli(rng):
    rings = generate_rings(6000, rng, RADIUS, inner_share=0.6)
    r = np.hypot(rings.positions[:, 0], rings.positions[:, 2]) / RADIUS
    inner = r < 2.0 + 1e-4
    assert np.all((r >= 1.2 - 1e-4) & (r <= 2.0 + 1e-4) | (r >= 2.5 - 1e-4) & (r <= 4.0 + 1e-4))
    assert inner.mean() == pytest.approx(0.6, abs=0.03)
    assert np.all(np.abs(rings.positions[inner, 1] + 1.0) <= 0.25 + 1e-5)
    assert np.all(np.abs(rings.positions[~inner, 1] + 1.0) <= 0.4 + 1e-5)
    assert np.all((rings.sizes >= 0.0) & (rings.sizes < 1.0))
    assert rings.tint == PaletteConfig().rgb("ring_gold")


def test_star_is_volumetrically_uniform():
    rng = make_rng(3)
    star = generate_star(20000, rng, radius=0.8, tree_height=HEIGHT)
    r = np.linalg.norm(star.positions.astype(np.float64), axis=1)
    assert np.all(r <= 0.8 + 1e-5)
    # uniform ball: P(r < R/2) = 1/8
    assert np.mean(r < 0.4) == pytest.approx(0.125, abs=0.015)
    assert star.origin == (0.0, HEIGHT + 0.5, 0.0)


def test_snow_fills_the_box(rng):
    snow = generate_snow(1000, rng, box_size=30.0, speed_min=0.02, speed_range=0.05)
    assert np.all(np.abs(snow.positions) <= 15.0)
    assert np.all((snow.speeds >= 0.02) & (snow.speeds <= 0.07 + 1e-6))


def test_snow_wraps_from_bottom_to_top(rng):
    snow = generate_snow(5, rng, box_size=30.0)
    field = SnowField(snow, 30.0)
    snow.positions[0, 1] = -15.0
    snow.positions[1:, 1] = 0.0

    assert field.step(frozen=False)
    assert snow.positions[0, 1] == pytest.approx(15.0)
    assert np.allclose(snow.positions[1:, 1], -snow.speeds[1:], atol=1e-6)


def test_snow_frozen_does_not_move(rng):
    field = SnowField(generate_snow(50, rng), 30.0)
    before = field.positions.copy()
    assert field.step(frozen=True) is False
    assert np.array_equal(field.positions, before)


def test_snow_steps_compose():
    a = SnowField(generate_snow(300, make_rng(11)), 30.0)
    b = SnowField(generate_snow(300, make_rng(11)), 30.0)
    for _ in range(50):
        a.step()
    for _ in range(25):
        b.step()
    for _ in range(25):
        b.step()
    assert np.array_equal(a.positions, b.positions)
    assert np.all(a.positions[:, 1] <= 15.0) and np.all(a.positions[:, 1] >= -15.0)


def test_same_seed_same_layout():
    scene = SceneConfig(particle_count=100, ring_count=50, star_count=20, snow_count=30)
    first = build_populations(scene, PaletteConfig(), make_rng(99))
    second = build_populations(scene, PaletteConfig(), make_rng(99))
    for name in ("tree", "rings", "star", "snow"):
        for attr, arr in first[name].attributes().items():
            assert np.array_equal(arr, second[name].attributes()[attr])


def test_zero_count_population(rng):
    tree = generate_tree(0, rng, RADIUS, HEIGHT)
    assert tree.count == 0
    assert tree.buffers()["positions"].size == 0
