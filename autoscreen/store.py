"""XML persistence for screen and region collections.

Each collection lives in its own file::

    <?xml version="1.0" encoding="utf-8"?>
    <autoscreen xmlns:app="autoscreen" app:version="2.3.0.2" app:codename="Boombayah">
       <screens>
          <screen>
             <active>True</active>
             <viewid>...</viewid>
             ...
          </screen>
       </screens>
    </autoscreen>

The root markers record which release wrote the file. Files from older
releases are upgraded through the registered migrations while loading and
then rewritten with the current markers.
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar
from xml.etree import ElementTree
from xml.sax.saxutils import escape, quoteattr

from .collection import TargetCollection
from .logging_utils import log_exception
from .macros import DEFAULT_MACRO
from .models import DEFAULT_IMAGE_FORMAT, ImageFormat, Region, Screen
from .utils import ensure_directory
from .versions import Version, VersionManager

T = TypeVar("T", Screen, Region)

ROOT_NODE = "autoscreen"
APP_NAMESPACE = "autoscreen"
INDENT = "   "

_NEWLINE_ENTITIES = {"\n": "&#xA;", "\r": "&#xD;"}
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _decode_bool(text: str) -> bool:
    token = text.strip().lower()
    if token == "true":
        return True
    if token == "false":
        return False
    raise ValueError(f"'{text}' is not a valid boolean")


def _encode_bool(value: bool) -> str:
    return "True" if value else "False"


@dataclass(frozen=True)
class FieldSpec:
    tag: str
    attr: str
    decode: Callable[[str], Any] = str
    encode: Callable[[Any], str] = str
    # Lenient fields fall back to their default instead of failing the load.
    lenient: bool = False


def _text(tag: str, attr: str) -> FieldSpec:
    return FieldSpec(tag, attr)


def _int(tag: str, attr: str) -> FieldSpec:
    return FieldSpec(tag, attr, decode=int)


def _bool(tag: str, attr: str) -> FieldSpec:
    return FieldSpec(tag, attr, decode=_decode_bool, encode=_encode_bool)


_ACTIVE = _bool("active", "active")
_VIEW_ID = FieldSpec("viewid", "view_id", decode=lambda text: uuid.UUID(text.strip()))
_NAME = _text("name", "name")
_FOLDER = _text("folder", "folder")
_MACRO = _text("macro", "macro")
_FORMAT = FieldSpec(
    "format", "format", decode=ImageFormat.from_name, encode=lambda value: value.value, lenient=True
)
_JPEG_QUALITY = _int("jpeg_quality", "jpeg_quality")
_RESOLUTION_RATIO = _int("resolution_ratio", "resolution_ratio")
_MOUSE = _bool("mouse", "mouse")


@dataclass(frozen=True)
class TargetSchema:
    list_node: str
    entry_node: str
    factory: Type
    fields: Tuple[FieldSpec, ...]

    def field_for(self, tag: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.tag == tag:
                return spec
        return None


# Field order is the on-disk order; readers match by tag and do not rely on it.
SCREEN_SCHEMA = TargetSchema(
    list_node="screens",
    entry_node="screen",
    factory=Screen,
    fields=(
        _ACTIVE,
        _VIEW_ID,
        _NAME,
        _FOLDER,
        _MACRO,
        _int("component", "component"),
        _FORMAT,
        _JPEG_QUALITY,
        _RESOLUTION_RATIO,
        _MOUSE,
    ),
)

REGION_SCHEMA = TargetSchema(
    list_node="regions",
    entry_node="region",
    factory=Region,
    fields=(
        _ACTIVE,
        _VIEW_ID,
        _NAME,
        _FOLDER,
        _MACRO,
        _int("x", "x"),
        _int("y", "y"),
        _int("width", "width"),
        _int("height", "height"),
        _FORMAT,
        _JPEG_QUALITY,
        _RESOLUTION_RATIO,
        _MOUSE,
    ),
)


class TargetStore(Generic[T]):
    schema: TargetSchema

    def __init__(
        self,
        path: Path | None,
        logger: logging.Logger,
        version_manager: VersionManager | None = None,
        default_path: Path | None = None,
    ):
        self.path = path
        self._default_path = default_path
        self._logger = logger
        self._versions = version_manager or VersionManager()

    @property
    def versions(self) -> VersionManager:
        return self._versions

    def load(self, collection: TargetCollection[T]) -> bool:
        """Fill ``collection`` from the backing file, bootstrapping if it is missing.

        Returns False if anything goes wrong. Targets appended before the
        failure stay in the collection.
        """
        label = f"{type(self).__name__}::load"
        try:
            path = self._resolve_path()
            if not path.exists():
                self._logger.warning("Unable to find %s file \"%s\"; creating defaults", self.schema.list_node, path)
                for target in self._bootstrap():
                    collection.add(target)
                self.save(collection)
                return True

            self._logger.debug("%s file \"%s\" found. Attempting to load XML document", self.schema.list_node, path)
            root = ElementTree.parse(path).getroot()
            if root.tag != ROOT_NODE:
                raise ValueError(f"Unexpected root node <{root.tag}> in {path}")

            codename = _root_attribute(root, "codename")
            number = _root_attribute(root, "version")
            detected = self._versions.detect(codename, number)
            is_old = detected < self._versions.current
            if is_old:
                self._logger.debug(
                    "An old version of %s (%s) was detected. Attempting upgrade to %s",
                    path.name,
                    detected,
                    self._versions.current,
                )

            for node in root.iterfind(f"{self.schema.list_node}/{self.schema.entry_node}"):
                target = self._versions.upgrade(self._decode(node), detected)
                if target.name:
                    collection.add(target)

            if is_old:
                self._logger.debug("%s detected as an old version; rewriting", path.name)
                self.save(collection)
            return True
        except Exception as exc:
            log_exception(self._logger, label, exc)
            return False

    def save(self, collection: Iterable[T]) -> bool:
        label = f"{type(self).__name__}::save"
        try:
            path = self._resolve_path()
            document = self._render(collection, self._versions.current)
            data = document.encode("utf-8")
            ensure_directory(path.parent)
            if path.exists():
                path.unlink()
            path.write_bytes(data)
            self._logger.debug("Saved %s to %s", self.schema.list_node, path)
            return True
        except Exception as exc:
            log_exception(self._logger, label, exc)
            return False

    def _resolve_path(self) -> Path:
        if self.path is None:
            if self._default_path is None:
                raise ValueError(f"No file configured for {self.schema.list_node}")
            self.path = self._default_path
        return self.path

    def _bootstrap(self) -> List[T]:
        return []

    def _decode(self, node: ElementTree.Element) -> T:
        values: Dict[str, Any] = {}
        for child in node:
            spec = self.schema.field_for(child.tag)
            if spec is None or not child.text:
                continue
            try:
                values[spec.attr] = spec.decode(child.text)
            except ValueError:
                if not spec.lenient:
                    raise
                self._logger.warning("Ignoring invalid <%s> value %r; using default", spec.tag, child.text)
        return self.schema.factory(**values)

    def _render(self, collection: Iterable[T], version: Version) -> str:
        lines = [
            '<?xml version="1.0" encoding="utf-8"?>',
            f"<{ROOT_NODE} xmlns:app={quoteattr(APP_NAMESPACE)}"
            f" app:version={quoteattr(version.number)} app:codename={quoteattr(version.codename)}>",
            f"{INDENT}<{self.schema.list_node}>",
        ]
        for target in collection:
            lines.append(f"{INDENT * 2}<{self.schema.entry_node}>")
            for spec in self.schema.fields:
                value = _escape_text(spec.encode(getattr(target, spec.attr)))
                if value:
                    lines.append(f"{INDENT * 3}<{spec.tag}>{value}</{spec.tag}>")
                else:
                    lines.append(f"{INDENT * 3}<{spec.tag} />")
            lines.append(f"{INDENT * 2}</{self.schema.entry_node}>")
        lines.append(f"{INDENT}</{self.schema.list_node}>")
        lines.append(f"</{ROOT_NODE}>")
        return "\n".join(lines) + "\n"


class ScreenStore(TargetStore[Screen]):
    schema = SCREEN_SCHEMA

    def __init__(
        self,
        path: Path | None,
        logger: logging.Logger,
        display_count: Callable[[], int] = lambda: 0,
        screenshots_folder: str = "",
        default_macro: str = DEFAULT_MACRO,
        default_format: ImageFormat = DEFAULT_IMAGE_FORMAT,
        version_manager: VersionManager | None = None,
        default_path: Path | None = None,
    ):
        super().__init__(path, logger, version_manager, default_path)
        self._display_count = display_count
        self._screenshots_folder = screenshots_folder
        self._default_macro = default_macro
        self._default_format = default_format

    def _bootstrap(self) -> List[Screen]:
        screens = []
        for number in range(1, self._display_count() + 1):
            screens.append(
                Screen(
                    view_id=uuid.uuid4(),
                    name=f"Screen {number}",
                    folder=self._screenshots_folder,
                    macro=self._default_macro,
                    component=number,
                    format=self._default_format,
                    jpeg_quality=100,
                    resolution_ratio=100,
                    mouse=True,
                    active=True,
                )
            )
            self._logger.debug(
                "Screen %s created using \"%s\" for folder path and \"%s\" for macro",
                number,
                self._screenshots_folder,
                self._default_macro,
            )
        return screens


class RegionStore(TargetStore[Region]):
    schema = REGION_SCHEMA


def _root_attribute(root: ElementTree.Element, name: str) -> Optional[str]:
    value = root.get(f"{{{APP_NAMESPACE}}}{name}")
    if value is None:
        value = root.get(name)
    return value


def _escape_text(value: str) -> str:
    if _INVALID_XML_CHARS.search(value):
        raise ValueError(f"Value {value!r} contains characters not allowed in XML")
    return escape(value, _NEWLINE_ENTITIES)
