"""Procedural contract shapes.

Each generator paints into a pre-sized empty pattern in place and stops
once it has placed roughly ``target`` cells. Every routine clamps to the
pattern bounds, so small grids get a smaller shape rather than an error.
"""
from __future__ import annotations

import math
import random
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

from game.types import Complexity, Pattern


class ShapeKind(str, Enum):
    LINE = "line"
    DOT_CLUSTER = "dot_cluster"
    CORNER = "corner"
    SQUARE = "square"
    L_SHAPE = "l_shape"
    T_SHAPE = "t_shape"
    CROSS = "cross"
    DIAGONAL = "diagonal"
    HOLLOW_SQUARE = "hollow_square"
    ZIGZAG = "zigzag"
    SCATTERED = "scattered"
    FRAME_PARTIAL = "frame_partial"
    CHECKERBOARD_PARTIAL = "checkerboard_partial"
    SPIRAL = "spiral"
    MULTI_SHAPE = "multi_shape"
    STRIPES = "stripes"
    MAZE_SECTION = "maze_section"


SHAPES_BY_COMPLEXITY: Dict[Complexity, Tuple[ShapeKind, ...]] = {
    Complexity.SIMPLE: (ShapeKind.LINE, ShapeKind.DOT_CLUSTER, ShapeKind.CORNER),
    Complexity.BASIC: (ShapeKind.LINE, ShapeKind.SQUARE, ShapeKind.L_SHAPE, ShapeKind.DIAGONAL),
    Complexity.MEDIUM: (
        ShapeKind.SQUARE, ShapeKind.L_SHAPE, ShapeKind.T_SHAPE, ShapeKind.CROSS, ShapeKind.DIAGONAL,
    ),
    Complexity.COMPLEX: (
        ShapeKind.HOLLOW_SQUARE, ShapeKind.CROSS, ShapeKind.ZIGZAG, ShapeKind.SCATTERED,
        ShapeKind.FRAME_PARTIAL,
    ),
    Complexity.ADVANCED: (
        ShapeKind.HOLLOW_SQUARE, ShapeKind.MULTI_SHAPE, ShapeKind.CHECKERBOARD_PARTIAL, ShapeKind.SPIRAL,
    ),
    Complexity.EXPERT: (
        ShapeKind.MULTI_SHAPE, ShapeKind.STRIPES, ShapeKind.HOLLOW_SQUARE, ShapeKind.MAZE_SECTION,
    ),
    Complexity.MASTER: (
        ShapeKind.MULTI_SHAPE, ShapeKind.MAZE_SECTION, ShapeKind.STRIPES, ShapeKind.SCATTERED,
    ),
}

Generator = Callable[[Pattern, Sequence[str], int, random.Random], None]


def empty_pattern(width: int, height: int) -> Pattern:
    return [[None] * width for _ in range(height)]


def count_cells(pattern: Pattern) -> int:
    return sum(1 for row in pattern for cell in row if cell is not None)


def shapes_for(complexity: Complexity) -> Tuple[ShapeKind, ...]:
    return SHAPES_BY_COMPLEXITY.get(complexity, (ShapeKind.LINE, ShapeKind.SQUARE))


def _dims(pattern: Pattern) -> Tuple[int, int]:
    return len(pattern[0]), len(pattern)


# ── Simple shapes ────────────────────────────────────────────────────

def line(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    if rng.random() > 0.5:
        length = min(target, w)
        y = rng.randrange(h)
        start = rng.randrange(w - length + 1)
        for i in range(length):
            pattern[y][start + i] = color
    else:
        length = min(target, h)
        x = rng.randrange(w)
        start = rng.randrange(h - length + 1)
        for i in range(length):
            pattern[start + i][x] = color


def dot_cluster(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    cx, cy = rng.randrange(w), rng.randrange(h)
    placed = 0
    for radius in range(3):
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if placed >= target:
                    return
                x, y = cx + dx, cy + dy
                if 0 <= x < w and 0 <= y < h and pattern[y][x] is None:
                    pattern[y][x] = rng.choice(colors)
                    placed += 1


def corner(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    cx, cy = rng.choice([(0, 0), (w - 1, 0), (0, h - 1), (w - 1, h - 1)])
    dx = 1 if cx == 0 else -1
    dy = 1 if cy == 0 else -1

    placed = 0
    for i in range(3):
        x = cx + dx * i
        if placed < target and 0 <= x < w:
            pattern[cy][x] = color
            placed += 1
    for i in range(1, 3):
        y = cy + dy * i
        if placed < target and 0 <= y < h:
            pattern[y][cx] = color
            placed += 1


def square(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    side = min(math.ceil(math.sqrt(target)), w, h)
    sx = rng.randrange(w - side + 1)
    sy = rng.randrange(h - side + 1)
    placed = 0
    for dy in range(side):
        for dx in range(side):
            if placed >= target:
                return
            pattern[sy + dy][sx + dx] = color
            placed += 1


def l_shape(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    arm = min(math.ceil(target / 2), w, h)
    sx = rng.randrange(w - arm + 1)
    sy = rng.randrange(h - arm + 1)
    placed = 0
    for i in range(arm):
        if placed >= target:
            return
        pattern[sy + i][sx] = color
        placed += 1
    for i in range(1, arm):
        if placed >= target:
            return
        pattern[sy + arm - 1][sx + i] = color
        placed += 1


def t_shape(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    arm = math.ceil(target / 4) + 1
    cx, cy = w // 2, h // 2
    placed = 0
    for i in range(-arm, arm + 1):
        x = cx + i
        if placed < target and 0 <= x < w:
            pattern[cy][x] = color
            placed += 1
    for i in range(1, arm + 1):
        y = cy + i
        if placed < target and y < h:
            pattern[y][cx] = color
            placed += 1


def cross(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    cx, cy = w // 2, h // 2
    pattern[cy][cx] = color
    placed = 1
    for i in range(1, math.ceil(target / 4) + 1):
        for x, y in ((cx, cy - i), (cx, cy + i), (cx - i, cy), (cx + i, cy)):
            if placed >= target:
                return
            if 0 <= x < w and 0 <= y < h:
                pattern[y][x] = color
                placed += 1


def diagonal(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    direction = 1 if rng.random() > 0.5 else -1
    sx = 0 if direction > 0 else w - 1
    length = min(target, h)
    sy = rng.randrange(h - length + 1)
    for i in range(length):
        x = sx + direction * i
        if 0 <= x < w:
            pattern[sy + i][x] = color


# ── Outlines and scatter ─────────────────────────────────────────────

def hollow_square(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    side = min(max(3, math.ceil((target + 4) / 4)), w, h)
    sx = rng.randrange(w - side + 1)
    sy = rng.randrange(h - side + 1)

    cells: List[Tuple[int, int]] = []
    for i in range(side):
        cells += [(sx + i, sy), (sx + i, sy + side - 1)]
    for i in range(1, side - 1):
        cells += [(sx, sy + i), (sx + side - 1, sy + i)]
    for x, y in cells[:target]:
        pattern[y][x] = color


def zigzag(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    x = rng.randrange(max(1, w - 2))
    direction = 1
    for y in range(min(target, h)):
        pattern[y][x] = color
        x = min(max(x + direction, 0), w - 1)
        if x >= w - 1 or x <= 0:
            direction = -direction


def scattered(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    free = [(x, y) for y in range(h) for x in range(w) if pattern[y][x] is None]
    for x, y in rng.sample(free, min(target, len(free))):
        pattern[y][x] = rng.choice(colors)


def frame_partial(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    color = rng.choice(colors)
    placed = 0
    for x in range(0, w, 2):
        if placed >= target / 2:
            break
        pattern[0][x] = color
        placed += 1
        if h > 1:
            pattern[h - 1][x] = color
            placed += 1
    for y in range(1, h - 1, 2):
        if placed >= target:
            break
        pattern[y][0] = color
        placed += 1
        if w > 1:
            pattern[y][w - 1] = color
            placed += 1


def checkerboard_partial(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    first = colors[0]
    second = colors[1] if len(colors) > 1 else colors[0]
    cx, cy = w // 2, h // 2
    radius = math.ceil(math.sqrt(target / 2))
    placed = 0
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if placed >= target:
                return
            x, y = cx + dx, cy + dy
            if 0 <= x < w and 0 <= y < h:
                pattern[y][x] = first if (x + y) % 2 == 0 else second
                placed += 1


# ── Larger compositions ──────────────────────────────────────────────

def spiral(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    """Clockwise inward spiral with a one-cell gap between rings."""
    w, h = _dims(pattern)
    color = rng.choice(colors)
    side = min(max(3, math.ceil(math.sqrt(target * 1.5))), w, h)
    x = rng.randrange(w - side + 1)
    y = rng.randrange(h - side + 1)

    legs = [side - 1] * 3
    length = side - 3
    while length > 0:
        legs += [length, length]
        length -= 2

    pattern[y][x] = color
    placed = 1
    steps = ((1, 0), (0, 1), (-1, 0), (0, -1))
    for i, leg in enumerate(legs):
        dx, dy = steps[i % 4]
        for _ in range(leg):
            if placed >= target:
                return
            x, y = x + dx, y + dy
            pattern[y][x] = color
            placed += 1


def multi_shape(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    parts = rng.randint(2, 3)
    share = max(1, target // parts)
    for _ in range(parts):
        kind = rng.choice((ShapeKind.LINE, ShapeKind.SQUARE, ShapeKind.DOT_CLUSTER, ShapeKind.CORNER))
        GENERATORS[kind](pattern, colors, share, rng)


def stripes(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    w, h = _dims(pattern)
    horizontal = rng.random() > 0.5
    offset = rng.randrange(2)
    lines, span = (h, w) if horizontal else (w, h)
    placed = 0
    for n, i in enumerate(range(offset, lines, 2)):
        color = colors[n % len(colors)]
        for j in range(span):
            if placed >= target:
                return
            if horizontal:
                pattern[i][j] = color
            else:
                pattern[j][i] = color
            placed += 1


def maze_section(pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    """Depth-first carve on the even lattice; every push paints a new cell so it always ends."""
    w, h = _dims(pattern)
    color = rng.choice(colors)
    x = rng.randrange(0, w, 2)
    y = rng.randrange(0, h, 2)
    pattern[y][x] = color
    placed = 1
    stack = [(x, y)]
    while stack and placed < target:
        x, y = stack[-1]
        options = [
            (x + dx, y + dy) for dx, dy in ((2, 0), (-2, 0), (0, 2), (0, -2))
            if 0 <= x + dx < w and 0 <= y + dy < h and pattern[y + dy][x + dx] is None
        ]
        if not options:
            stack.pop()
            continue
        nx, ny = rng.choice(options)
        pattern[(y + ny) // 2][(x + nx) // 2] = color
        placed += 1
        if placed >= target:
            break
        pattern[ny][nx] = color
        placed += 1
        stack.append((nx, ny))


GENERATORS: Dict[ShapeKind, Generator] = {
    ShapeKind.LINE: line,
    ShapeKind.DOT_CLUSTER: dot_cluster,
    ShapeKind.CORNER: corner,
    ShapeKind.SQUARE: square,
    ShapeKind.L_SHAPE: l_shape,
    ShapeKind.T_SHAPE: t_shape,
    ShapeKind.CROSS: cross,
    ShapeKind.DIAGONAL: diagonal,
    ShapeKind.HOLLOW_SQUARE: hollow_square,
    ShapeKind.ZIGZAG: zigzag,
    ShapeKind.SCATTERED: scattered,
    ShapeKind.FRAME_PARTIAL: frame_partial,
    ShapeKind.CHECKERBOARD_PARTIAL: checkerboard_partial,
    ShapeKind.SPIRAL: spiral,
    ShapeKind.MULTI_SHAPE: multi_shape,
    ShapeKind.STRIPES: stripes,
    ShapeKind.MAZE_SECTION: maze_section,
}


def draw(kind: ShapeKind, pattern: Pattern, colors: Sequence[str], target: int, rng: random.Random) -> None:
    if not pattern or not pattern[0] or not colors or target <= 0:
        return
    GENERATORS[kind](pattern, colors, target, rng)
