"""
DBC library: the ingest/merge engine.

DbcLibrary folds a stream of independently parsed entries into frame
records keyed by arbitration ID. Entries are applied one at a time and in
order: an SG_ line carries no frame ID and belongs to the frame touched
most recently before it.
"""
from __future__ import annotations

import logging
import os
from typing import Dict, Iterator, List, Optional, Union

from candb import metrics
from candb.config import ConfigManager, LoaderSettings
from candb.exceptions import DbcReadError, MissingContextError, UnsupportedEntryError
from candb.models.entry import Entry, EntryKind
from candb.models.frame import DbcFrame
from candb.models.signal import DbcSignal
from candb.parser import parse_entry

logger = logging.getLogger(__name__)

_EXPLICIT_ID_KINDS = frozenset({
    EntryKind.FRAME_DEFINITION,
    EntryKind.FRAME_DESCRIPTION,
    EntryKind.FRAME_ATTRIBUTE,
    EntryKind.SIGNAL_DESCRIPTION,
    EntryKind.SIGNAL_ATTRIBUTE,
    EntryKind.SIGNAL_VALUE_TABLE,
})


class DbcLibrary:
    """A CANdb database: frame records keyed by arbitration ID.

    The library is built serially through ``add_entry`` (or the
    ``from_text``/``from_file`` loaders) and then read by queries. It has no
    internal locking; finish ingestion before sharing it across threads.

    Attributes:
        _frames: Arbitration ID -> DbcFrame
        _last_frame_id: ID of the most recently created or updated frame
        settings: Loader settings the library was built with
    """

    def __init__(self, frames: Optional[Dict[int, DbcFrame]] = None,
                 settings: Optional[LoaderSettings] = None):
        """Initialize the library, optionally from a pre-built frame mapping.

        Args:
            frames: Arbitration ID -> DbcFrame to start from
            settings: Loader settings; the designated attribute drives the
                      attribute views of ``signal_attribute_view``
        """
        self._frames: Dict[int, DbcFrame] = dict(frames or {})
        self._last_frame_id: Optional[int] = None
        self.settings = settings or LoaderSettings()

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[DbcFrame]:
        return iter(self._frames.values())

    def __contains__(self, frame_id: int) -> bool:
        return frame_id in self._frames

    def __repr__(self) -> str:
        return f"DbcLibrary(frames={len(self._frames)})"

    @property
    def last_frame_id(self) -> Optional[int]:
        return self._last_frame_id

    # Loading

    @classmethod
    def from_text(cls, source: str, settings: Optional[LoaderSettings] = None) -> 'DbcLibrary':
        """Build a library from DBC source text.

        Loading is best effort: lines the tokenizer does not understand and
        entries the merge engine rejects are skipped.

        Args:
            source: Complete DBC file contents
            settings: Loader settings (defaults are used when None)

        Returns:
            The populated library
        """
        settings = settings or LoaderSettings()
        lib = cls(settings=settings)
        parsed = skipped = rejected = 0

        for line in source.split('\n'):
            # only LF and CRLF end a line; other Unicode breaks stay in the text
            if line.endswith('\r'):
                line = line[:-1]
            if settings.skip_blank_lines and not line.strip():
                continue
            entry = parse_entry(line)
            if entry is None:
                skipped += 1
                continue
            try:
                lib.add_entry(entry)
            except (MissingContextError, UnsupportedEntryError) as e:
                logger.debug(f"Ignoring {entry.kind} entry: {e}")
                rejected += 1
                continue
            parsed += 1

        metrics.inc('dbc_entries_added', parsed)
        metrics.inc('dbc_lines_skipped', skipped)
        metrics.inc('dbc_entries_rejected', rejected)
        logger.debug(f"DBC text loaded: {parsed} entries added, {skipped} lines skipped, "
                     f"{rejected} entries rejected")
        return lib

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike],
                  settings: Optional[LoaderSettings] = None) -> 'DbcLibrary':
        """Load an entire DBC file.

        File bytes are decoded with a single-byte encoding (ISO-8859-1 by
        default) and undecodable bytes are replaced.

        Args:
            path: Path to the DBC file
            settings: Loader settings (defaults are used when None)

        Returns:
            The populated library

        Raises:
            OSError: If the file cannot be opened or read
            DbcReadError: If the bytes cannot be decoded with the configured encoding
        """
        settings = settings or LoaderSettings()
        logger.info(f"Loading DBC file: {path}")

        with open(path, 'rb') as fh:
            contents = fh.read()

        try:
            text = contents.decode(settings.encoding, errors=settings.decode_errors)
        except (LookupError, UnicodeDecodeError) as e:
            raise DbcReadError(f"Failed to decode DBC file {path}: {e}",
                               path=str(path), encoding=settings.encoding,
                               original_error=e) from e

        lib = cls.from_text(text, settings)
        logger.info(f"DBC loaded successfully: {len(lib)} frames")
        return lib

    @classmethod
    def from_config(cls, path: Union[str, os.PathLike],
                    config: Optional[ConfigManager] = None) -> 'DbcLibrary':
        """Load a DBC file with the loader settings of a ConfigManager.

        Args:
            path: Path to the DBC file
            config: Configuration to use; a new ConfigManager (config file,
                    environment, defaults) is created when None

        Raises:
            ConfigurationError: If the configuration is invalid
            OSError: If the file cannot be opened or read
        """
        config = config or ConfigManager()
        config.require_valid()
        return cls.from_file(path, config.loader_settings)

    # Merge engine

    def _resolve_frame_id(self, entry: Entry) -> int:
        if entry.kind in _EXPLICIT_ID_KINDS:
            return entry.id
        if entry.kind is EntryKind.SIGNAL_DEFINITION:
            # SG_ lines carry no ID and must follow a BO_ line
            if self._last_frame_id is None:
                raise MissingContextError(
                    "Tried to add SignalDefinition without last frame ID.",
                    entry_kind=entry.kind)
            return self._last_frame_id
        raise UnsupportedEntryError(f"Unsupported entry: {entry.kind}.", entry_kind=entry.kind)

    def add_entry(self, entry: Entry) -> None:
        """Merge one DBC entry into the library.

        Frame entries and signal entries with an explicit ID target that
        frame; a SignalDefinition targets the frame touched last. A missing
        frame record is created from the entry, an existing one is merged
        into. Afterwards the target becomes the last touched frame.

        Raises:
            MissingContextError: If a SignalDefinition arrives before any frame
            UnsupportedEntryError: If the entry kind does not apply (e.g. Version)
        """
        frame_id = self._resolve_frame_id(entry)

        frame = self._frames.get(frame_id)
        if frame is None:
            self._frames[frame_id] = DbcFrame.from_entry(frame_id, entry)
        else:
            frame.merge_entry(entry)

        self._last_frame_id = frame_id

    # Queries

    def get_frame(self, frame_id: int) -> Optional[DbcFrame]:
        return self._frames.get(frame_id)

    def get_frames(self) -> List[DbcFrame]:
        return list(self._frames.values())

    def get_frame_ids(self) -> List[int]:
        return list(self._frames.keys())

    def get_signal(self, name: str) -> Optional[DbcSignal]:
        """Return the first signal called ``name`` in any frame.

        Frames are scanned in insertion order, which is not necessarily ID
        order. If several frames define the same signal name the result is
        whichever is met first.
        """
        for frame in self._frames.values():
            signal = frame.signals.get(name)
            if signal is not None:
                return signal
        return None

    def get_signal_by_attribute(self, key: str, value: str) -> Optional[DbcSignal]:
        """Return the first signal whose attribute ``key`` equals ``value`` (e.g. SPN 190)."""
        for frame in self._frames.values():
            for signal in frame.signals.values():
                if signal.attributes.get(key) == value:
                    return signal
        return None

    def get_signal_by_designated_attribute(self, value: str) -> Optional[DbcSignal]:
        """Return the first signal whose designated attribute (``settings``) equals ``value``."""
        return self.get_signal_by_attribute(self.settings.designated_attribute, value)

    def signal_attribute_view(self, frame_id: int, key: Optional[str] = None) -> Dict[str, str]:
        """Signal name -> attribute value for one frame.

        Args:
            frame_id: Arbitration ID of the frame
            key: Attribute key; defaults to the designated attribute of ``settings``

        Returns:
            The view, empty for an unknown frame
        """
        frame = self._frames.get(frame_id)
        if frame is None:
            return {}
        return frame.signal_attribute_view(key or self.settings.designated_attribute)

    def is_empty(self) -> bool:
        return not self._frames
