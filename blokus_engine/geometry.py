"""
Polyomino geometry helpers.

Shapes are tuples of (x, y) offsets. Every function here returns a normalized
shape: translated so that min x == 0 and min y == 0, with the offsets sorted so
that equal shapes compare and hash equal.
"""

from typing import Iterable, List, Tuple

Cell = Tuple[int, int]
Shape = Tuple[Cell, ...]


def normalize(cells: Iterable[Cell]) -> Shape:
    """
    Translate cells so the minimum x and minimum y are 0.

    Args:
        cells: Iterable of (x, y) offsets

    Returns:
        Sorted tuple of normalized offsets

    Raises:
        ValueError: If no cells are given or a cell is repeated
    """
    cells = [(int(x), int(y)) for x, y in cells]
    if not cells:
        raise ValueError("A shape needs at least one cell")
    if len(set(cells)) != len(cells):
        raise ValueError(f"Shape has duplicate cells: {cells}")

    min_x = min(x for x, _ in cells)
    min_y = min(y for _, y in cells)
    return tuple(sorted((x - min_x, y - min_y) for x, y in cells))


def bounds(shape: Iterable[Cell]) -> Tuple[int, int, int, int]:
    """Return (min_x, max_x, min_y, max_y) of a shape."""
    xs = [x for x, _ in shape]
    ys = [y for _, y in shape]
    return min(xs), max(xs), min(ys), max(ys)


def rotate90(shape: Iterable[Cell]) -> Shape:
    """Rotate a quarter turn, mapping (x, y) to (-y, x)."""
    return normalize((-y, x) for x, y in shape)


def flip_horizontal(shape: Iterable[Cell]) -> Shape:
    """Mirror across the vertical axis of the shape's bounding box."""
    shape = list(shape)
    _, max_x, _, _ = bounds(shape)
    return normalize((max_x - x, y) for x, y in shape)


def flip_vertical(shape: Iterable[Cell]) -> Shape:
    """Mirror across the horizontal axis of the shape's bounding box."""
    shape = list(shape)
    _, _, _, max_y = bounds(shape)
    return normalize((x, max_y - y) for x, y in shape)


def symmetry_images(shape: Iterable[Cell]) -> List[Shape]:
    """
    Generate the 8 images of a shape under the dihedral group.

    Four rotations of the shape followed by four rotations of its horizontal
    mirror. Images may repeat for symmetric pieces.
    """
    images = []
    current = normalize(shape)
    for _ in range(4):
        images.append(current)
        current = rotate90(current)

    current = flip_horizontal(images[0])
    for _ in range(4):
        images.append(current)
        current = rotate90(current)

    return images


def canonicalize(shape: Iterable[Cell]) -> Shape:
    """
    Return the symmetry-minimal form of a shape.

    Two shapes are the same piece iff their canonical forms are equal, so this
    is what inventories are keyed on.
    """
    return min(symmetry_images(shape))


def all_orientations(shape: Iterable[Cell]) -> List[Shape]:
    """Distinct orientations of a shape (1 to 8), in a stable order."""
    seen = set()
    orientations = []
    for image in symmetry_images(shape):
        if image in seen:
            continue
        seen.add(image)
        orientations.append(image)
    return orientations


def orient(base: Iterable[Cell], rotation: int = 0,
           flip_h: bool = False, flip_v: bool = False) -> Shape:
    """
    Rebuild an oriented shape from its base shape and cumulative transforms.

    Flips are applied to the base first, then `rotation` quarter turns. The
    result is always recomputed from the base, so repeated transforms never
    drift.
    """
    shape = normalize(base)
    if flip_h:
        shape = flip_horizontal(shape)
    if flip_v:
        shape = flip_vertical(shape)
    for _ in range(rotation % 4):
        shape = rotate90(shape)
    return shape


def absolute_cells(shape: Iterable[Cell], origin: Cell) -> List[Cell]:
    """Board cells covered by a shape whose local (0, 0) sits at origin."""
    ox, oy = origin
    return [(ox + x, oy + y) for x, y in shape]


def shape_to_ascii(shape: Iterable[Cell]) -> str:
    """Render a shape as rows of '#' and '.' for debug logs."""
    shape = normalize(shape)
    _, max_x, _, max_y = bounds(shape)
    cells = set(shape)
    rows = []
    for y in range(max_y + 1):
        rows.append("".join("#" if (x, y) in cells else "." for x in range(max_x + 1)))
    return "\n".join(rows)
