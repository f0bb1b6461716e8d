"""Frame filename normalisation and the ordered frame index.

A canonical frame name is ``<prefix>_<digits>.<ext>`` where the digit
string length is a positive multiple of four. Names produced by some
upstream tools, ``<prefix>_<4 digits>_<000N>.<ext>``, are accepted and
truncated at the second underscore.

Every input is parsed and normalised before any file is touched, so a
duplicate id or an unparseable name leaves the directory as it was.
"""

from __future__ import annotations

import logging
import re
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Iterator

from .errors import (
    DuplicateIdentifierError,
    FramesNotFoundError,
    InvalidFilenameError,
    RenameError,
)

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "bmp", "tif", "tiff", "webp"})
MAX_IDENTIFIER = 2**32 - 1
DIGIT_GROUP = 4

_ASCII_DIGITS = frozenset("0123456789")
_DIGIT_RUN = re.compile(r"[0-9]+")


def pad_digits(digits: str) -> str:
    """Left-pad with zeros to the smallest positive multiple of four."""
    width = max(DIGIT_GROUP, -(-len(digits) // DIGIT_GROUP) * DIGIT_GROUP)
    return digits.zfill(width)


def canonical_digits(identifier: int) -> str:
    return pad_digits(str(identifier))


def normalize_suffix(suffix: str) -> str:
    """Truncate at the first underscore after the first digit, keep digits, pad."""
    first_digit = next((i for i, c in enumerate(suffix) if c in _ASCII_DIGITS), None)
    if first_digit is not None:
        underscore = suffix.find("_", first_digit + 1)
        if underscore != -1:
            suffix = suffix[:underscore]
    digits = "".join(c for c in suffix if c in _ASCII_DIGITS)
    if not digits:
        return digits
    return pad_digits(digits)


@dataclass(frozen=True)
class FilenameParts:
    """The pieces of a frame filename; ``save_file`` is the only side effect."""

    prefix: str
    suffix: str
    path: Path
    extension: str  # with leading dot, case preserved
    modified: bool = False

    @classmethod
    def from_path(cls, path: Path | str) -> FilenameParts:
        path = Path(path)
        name = path.name
        try:
            name.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidFilenameError(path, "Filename is not valid UTF-8") from None

        if not path.suffix or path.suffix == ".":
            raise InvalidFilenameError(path, "Filename does not have a valid extension")

        stem = path.stem
        prefix, sep, suffix = stem.partition("_")
        if not sep:
            raise InvalidFilenameError(
                path, "Filename does not contain '_' to split into prefix and suffix"
            )
        if _DIGIT_RUN.search(suffix) is None:
            raise InvalidFilenameError(path, "Filename suffix contains no digits")

        return cls(prefix=prefix, suffix=suffix, path=path, extension=path.suffix)

    @property
    def extension_key(self) -> str:
        """Lowercased extension without the dot, for matching."""
        return self.extension.lstrip(".").lower()

    @property
    def identifier(self) -> int:
        digits = normalize_suffix(self.suffix)
        if not digits:
            raise InvalidFilenameError(self.path, "Filename suffix contains no digits")
        value = int(digits)
        if value > MAX_IDENTIFIER:
            raise InvalidFilenameError(self.path, f"Identifier {value} does not fit in 32 bits")
        return value

    @property
    def canonical_name(self) -> str:
        return f"{self.prefix}_{self.suffix}{self.extension}"

    def normalize(self, required_prefix: str | None = None) -> FilenameParts:
        """Return the canonical form; ``modified`` records whether anything changed."""
        suffix = normalize_suffix(self.suffix)
        if not suffix:
            raise InvalidFilenameError(self.path, "Filename suffix contains no digits")
        prefix = self.prefix
        if required_prefix is not None and prefix != required_prefix:
            prefix = required_prefix
        changed = suffix != self.suffix or prefix != self.prefix
        return replace(self, prefix=prefix, suffix=suffix, modified=self.modified or changed)

    def save_file(self, destination_dir: Path | None = None) -> FilenameParts:
        """Write the canonical name to disk.

        Without ``destination_dir`` the file is renamed beside itself (only
        when modified). With it, the file is copied there under its
        canonical name. Returns the parts pointing at the new path, with
        ``modified`` cleared.
        """
        if destination_dir is None:
            if not self.modified:
                return self
            new_path = self.path.with_name(self.canonical_name)
            if new_path != self.path:
                logger.debug(f"Renaming {self.path.name} -> {new_path.name}")
                try:
                    self.path.rename(new_path)
                except OSError as e:
                    raise RenameError(f"{self.path} -> {new_path}: {e}") from e
            return replace(self, path=new_path, modified=False)

        new_path = Path(destination_dir) / self.canonical_name
        logger.log(5, f"Copying {self.path} -> {new_path}")
        try:
            shutil.copy2(self.path, new_path)
        except OSError as e:
            raise RenameError(f"{self.path} -> {new_path}: {e}") from e
        return replace(self, path=new_path, modified=False)


class FrameIndex:
    """Ordered mapping from numeric id to frame path, ascending ids, no duplicates."""

    def __init__(self, entries: Iterable[tuple[int, Path]] = ()):
        self._entries: dict[int, Path] = {}
        for identifier, path in entries:
            self.insert(identifier, path)

    def insert(self, identifier: int, path: Path) -> None:
        existing = self._entries.get(identifier)
        if existing is not None:
            raise DuplicateIdentifierError(identifier, existing, path)
        self._entries[identifier] = Path(path)
        if len(self._entries) > 1 and identifier < max(self._entries):
            self._entries = dict(sorted(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __getitem__(self, identifier: int) -> Path:
        return self._entries[identifier]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FrameIndex):
            return list(self.items()) == list(other.items())
        if isinstance(other, dict):
            return self._entries == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"FrameIndex({len(self)} frames)"

    def get(self, identifier: int, default: Path | None = None) -> Path | None:
        return self._entries.get(identifier, default)

    def items(self):
        return self._entries.items()

    def ids(self) -> list[int]:
        return list(self._entries)

    def paths(self) -> list[Path]:
        return list(self._entries.values())


# ── Validation strategies ────────────────────────────────────────────

class FilenameValidator(ABC):
    """Turns raw paths into a FrameIndex of canonical names."""

    def __init__(self, required_prefix: str | None = None):
        self.required_prefix = required_prefix

    def validate_and_fix(self, paths: Iterable[Path | str]) -> FrameIndex:
        planned = plan_normalization(paths, self.required_prefix)
        index = FrameIndex()
        for identifier, parts in planned:
            saved = self._save(parts)
            index.insert(identifier, saved.path)
        changed = sum(1 for _, parts in planned if parts.modified)
        logger.debug(f"Indexed {len(index)} frames, {changed} names normalised")
        return index

    @abstractmethod
    def _save(self, parts: FilenameParts) -> FilenameParts:
        ...


class InPlaceValidator(FilenameValidator):
    """Renames malformed names beside the original.

    When the canonical name is already taken by a file that is not part of
    the input set, the frame is copied to a fallback scratch directory
    instead. Without a ``fallback_dir`` such a collision raises RenameError.
    """

    def __init__(self, required_prefix: str | None = None, fallback_dir: Path | None = None):
        super().__init__(required_prefix)
        self.fallback_dir = Path(fallback_dir) if fallback_dir is not None else None

    def _save(self, parts: FilenameParts) -> FilenameParts:
        if not parts.modified:
            return parts
        target = parts.path.with_name(parts.canonical_name)
        if target.exists() and not _same_file(target, parts.path):
            if self.fallback_dir is None:
                raise RenameError(f"{parts.path} -> {target}: target exists")
            self.fallback_dir.mkdir(parents=True, exist_ok=True)
            logger.warning(
                f"{target.name} already exists, copying {parts.path.name} to {self.fallback_dir}"
            )
            return parts.save_file(self.fallback_dir)
        return parts.save_file()


class ScratchCopyValidator(FilenameValidator):
    """Copies every frame into ``scratch_dir`` under its canonical name."""

    def __init__(self, scratch_dir: Path, required_prefix: str | None = None):
        super().__init__(required_prefix)
        self.scratch_dir = Path(scratch_dir)

    def _save(self, parts: FilenameParts) -> FilenameParts:
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        return parts.save_file(self.scratch_dir)


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.samefile(b)
    except OSError:
        return False


def plan_normalization(
    paths: Iterable[Path | str], required_prefix: str | None = None
) -> list[tuple[int, FilenameParts]]:
    """Parse and normalise every path, rejecting duplicate ids. Touches nothing."""
    seen: dict[int, Path] = {}
    planned: list[tuple[int, FilenameParts]] = []
    for path in sorted(Path(p) for p in paths):
        parts = FilenameParts.from_path(path).normalize(required_prefix)
        identifier = parts.identifier
        if identifier in seen:
            raise DuplicateIdentifierError(identifier, seen[identifier], path)
        seen[identifier] = path
        planned.append((identifier, parts))
    planned.sort(key=lambda item: item[0])
    return planned


def load_files(
    paths: Iterable[Path | str],
    validator: FilenameValidator | None = None,
    required_prefix: str | None = None,
) -> FrameIndex:
    """Build the frame index for ``paths`` (in place unless told otherwise)."""
    if validator is None:
        validator = InPlaceValidator(required_prefix=required_prefix)
    elif required_prefix is not None:
        validator.required_prefix = required_prefix
    return validator.validate_and_fix(paths)


def list_images(directory: Path, extensions: Iterable[str] = IMAGE_EXTENSIONS) -> list[Path]:
    """Regular, non-hidden files in ``directory`` with an image extension."""
    wanted = {e.lower().lstrip(".") for e in extensions}
    return sorted(
        p for p in Path(directory).iterdir()
        if p.is_file() and not p.name.startswith(".") and p.suffix.lower().lstrip(".") in wanted
    )


def load_directory(
    directory: Path | str,
    validator: FilenameValidator | None = None,
    required_prefix: str | None = None,
    extensions: Iterable[str] = IMAGE_EXTENSIONS,
) -> FrameIndex:
    """Index the frames of a directory; an empty result raises FramesNotFoundError."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FramesNotFoundError(directory)
    images = list_images(directory, extensions)
    logger.debug(f"Found {len(images)} images in {directory}")
    if not images:
        raise FramesNotFoundError(directory)
    index = load_files(images, validator=validator, required_prefix=required_prefix)
    if len(index) == 0:
        raise FramesNotFoundError(directory)
    return index


def stage_sequence(
    index: FrameIndex,
    destination: Path,
    prefix: str = "image",
) -> tuple[str, int]:
    """Copy ``index`` into a contiguous 1-based sequence ``<prefix>_<n>.<ext>``.

    All staged frames share the first frame's extension; frames in another
    format are converted with OpenCV. Returns the printf-style pattern (for
    the encoder) and the number of staged frames.
    """
    if len(index) == 0:
        raise FramesNotFoundError(destination)
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)

    paths = index.paths()
    extension = paths[0].suffix.lower()
    width = len(pad_digits(str(len(paths))))
    for number, source in enumerate(paths, start=1):
        target = destination / f"{prefix}_{number:0{width}d}{extension}"
        if source.suffix.lower() == extension:
            try:
                shutil.copy2(source, target)
            except OSError as e:
                raise RenameError(f"{source} -> {target}: {e}") from e
        else:
            _convert_image(source, target)
    pattern = f"{prefix}_%0{width}d{extension}"
    logger.debug(f"Staged {len(paths)} frames into {destination} as {pattern}")
    return pattern, len(paths)


def _convert_image(source: Path, target: Path) -> None:
    import cv2

    image = cv2.imread(str(source), cv2.IMREAD_UNCHANGED)
    if image is None or not cv2.imwrite(str(target), image):
        raise RenameError(f"cannot convert {source} to {target.suffix}")
