"""Parser for the line-oriented scene description format.

Each non-blank line holds one record; the first token selects its type and
the rest are floating point numbers:

    s cx cy cz r                   sphere with center and radius
    p px py pz nx ny nz            plane through a point with a normal
    c ex ey ez lx ly lz fov focal  camera eye, look-at target, vertical
                                   field of view (degrees), focal length

A ``#`` starts a comment that runs to the end of the line. At most one
camera line is allowed; without one a default camera at the origin looking
down +z is used.

Example:
    >>> import io
    >>> from skytrace.scene.parser import load_scene
    >>> scene = load_scene(io.StringIO("s 0 0 3 1\\np 0 -1 0 0 1 0\\n"), 16 / 9)
    >>> len(scene.surfaces)
    2
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from loguru import logger

from skytrace.camera.pinhole import PinholeCamera, default_camera
from skytrace.scene.manager import Scene

COMMENT_CHAR = "#"

# Number of numeric fields following each record tag
RECORD_ARITY = {
    "s": 4,
    "p": 6,
    "c": 8,
}

# Plain decimal or exponent notation; float() alone also takes "1_0"
NUMBER_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


class SceneParseError(ValueError):
    """Raised when a scene description is malformed.

    Attributes:
        line_number: 1-based line the error was found on, or None.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class Record:
    """One parsed scene line.

    Attributes:
        kind: The record tag ("s", "p" or "c").
        values: The numeric fields in file order.
    """

    kind: str
    values: tuple[float, ...]


def strip_comment(line: str) -> str:
    """Drop everything from the first comment character on."""
    index = line.find(COMMENT_CHAR)
    if index >= 0:
        return line[:index]
    return line


def parse_line(line: str) -> Record | None:
    """Parse a single line of a scene description.

    Args:
        line: The raw line, with or without trailing newline.

    Returns:
        The parsed record, or None for blank and comment-only lines.

    Raises:
        SceneParseError: On an unknown record type, a non-numeric token, or
            a wrong number of fields. The error carries no line number.
    """
    words = strip_comment(line).split()
    if not words:
        return None

    kind, fields = words[0], words[1:]
    arity = RECORD_ARITY.get(kind)
    if arity is None:
        raise SceneParseError(f"unexpected symbol {kind!r}")

    values = []
    for token in fields[:arity]:
        if NUMBER_RE.fullmatch(token) is None:
            raise SceneParseError(f"expected a number, got {token!r}")
        values.append(float(token))

    if len(fields) < arity:
        raise SceneParseError(f"record {kind!r} expects {arity} numbers, got {len(fields)}")
    if len(fields) > arity:
        raise SceneParseError(f"unexpected symbol {fields[arity]!r} after record {kind!r}")

    return Record(kind=kind, values=tuple(values))


def _camera_from_record(
    record: Record,
    aspect_ratio: float,
    fov: float | None,
    focal_length: float | None,
) -> PinholeCamera:
    ex, ey, ez, lx, ly, lz, line_fov, line_focal = record.values
    return PinholeCamera(
        eye=(ex, ey, ez),
        look_at=(lx, ly, lz),
        up=(0.0, 1.0, 0.0),
        fov=line_fov if fov is None else fov,
        aspect_ratio=aspect_ratio,
        focal_length=line_focal if focal_length is None else focal_length,
    )


def parse_records(lines: Iterable[str]) -> list[tuple[int, Record]]:
    """Parse every line of a scene description.

    The whole input is consumed before returning. Errors raised while
    reading the underlying stream (OSError) propagate unchanged.

    Args:
        lines: Any iterable of lines, e.g. an open text file.

    Returns:
        (line_number, record) pairs for every non-blank line.

    Raises:
        SceneParseError: On the first malformed line, with its line number.
    """
    records = []
    for line_number, line in enumerate(lines, start=1):
        try:
            record = parse_line(line)
        except SceneParseError as e:
            raise SceneParseError(str(e), line_number) from None
        if record is not None:
            logger.debug("line {}: {} {}", line_number, record.kind, record.values)
            records.append((line_number, record))
    return records


def load_scene(
    stream: TextIO | Iterable[str],
    aspect_ratio: float,
    focal_length: float | None = None,
    fov: float | None = None,
) -> Scene:
    """Build a Scene from a scene description stream.

    Args:
        stream: Readable text stream (or any iterable of lines).
        aspect_ratio: Width divided by height of the output image.
        focal_length: Optional focal length. Overrides the camera line's
            value and applies to the default camera.
        fov: Optional vertical field of view in degrees. Overrides the
            camera line's value and replaces the default camera's 30 degrees.

    Returns:
        The completed Scene, its camera already uploaded.

    Raises:
        SceneParseError: If the description is malformed, defines more
            than one camera, or holds more surfaces than the scene can
            store. No partial scene is returned.
        OSError: If reading the stream fails.
        ValueError: If the resulting camera or a plane is degenerate.
    """
    records = parse_records(stream)

    view = None
    for line_number, record in records:
        if record.kind == "c":
            if view is not None:
                raise SceneParseError("multiple camera definitions", line_number)
            view = _camera_from_record(record, aspect_ratio, fov, focal_length)

    if view is None:
        view = default_camera(aspect_ratio, fov=fov, focal_length=focal_length)

    scene = Scene()
    for line_number, record in records:
        try:
            if record.kind == "s":
                cx, cy, cz, radius = record.values
                scene.add_sphere((cx, cy, cz), radius)
            elif record.kind == "p":
                px, py, pz, nx, ny, nz = record.values
                scene.add_plane((px, py, pz), (nx, ny, nz))
        except (ValueError, RuntimeError) as e:
            # RuntimeError: surface table is full
            raise SceneParseError(str(e), line_number) from None
    scene.set_camera(view)

    logger.debug("Loaded {}", scene)
    return scene


def load_scene_file(
    path: str | os.PathLike[str],
    aspect_ratio: float,
    focal_length: float | None = None,
    fov: float | None = None,
) -> Scene:
    """Open a scene description file and build a Scene from it.

    See load_scene() for the arguments and errors.
    """
    with open(path, encoding="utf-8") as f:
        return load_scene(f, aspect_ratio, focal_length=focal_length, fov=fov)
