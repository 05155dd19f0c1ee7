# subocr_core/subtitles/parsers/vobsub.py
# -*- coding: utf-8 -*-
"""
VobSub (.idx/.sub) parser for DVD subtitles.

VobSub format consists of two files:
    - .idx: Text index file with the 16-color palette, timestamps and byte offsets
    - .sub: MPEG-2 program stream carrying subtitle packets (SPUs) in
      private stream 1

Each SPU holds an interlaced, run-length encoded 2-bit bitmap and a chain of
control sequences giving position, local palette, alpha and display times.

RLE Encoding formats:
    Value      Bits   Format
    1-3        4      nncc               (half a byte)
    4-15       8      00nnnncc           (one byte)
    16-63     12      0000nnnnnncc       (one and a half byte)
    64-255    16      000000nnnnnnnncc   (two bytes)
    0 in the 16-bit form fills the rest of the line.

The decoder keeps the raw 2-bit slot numbers instead of colors; palette and
alpha nibbles are kept in the order they are stored in the packet.
"""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

import numpy as np

from ...errors import SubtitleReadError
from ...models.subtitles import GlobalPalette, SubtitleEvent
from .base import ParseResult, SubtitleImageParser

logger = logging.getLogger(__name__)

PACK_START = b"\x00\x00\x01\xba"
PRIVATE_STREAM_1 = 0xBD
PROGRAM_END = 0xB9

# SP_DCSQ_STM ticks are 1024 periods of the 90 kHz clock
TICKS_PER_SECOND = 90000.0 / 1024.0

DEFAULT_DURATION = 4.0  # seconds, last subtitle without a stop command
MAX_SPU_READ = 65536 * 10


class MalformedSubtitleError(ValueError):
    """A single subtitle packet could not be decoded."""


@dataclass
class IdxEntry:
    """Parsed timestamp entry from the .idx file."""

    timestamp_ms: int
    file_position: int
    stream_index: int = 0


@dataclass
class VobSubHeader:
    """Header information from the .idx file."""

    size_x: int = 720
    size_y: int = 480
    palette: GlobalPalette = field(default_factory=list)
    language: str = "en"

    def __post_init__(self):
        if not self.palette:
            # Default grayscale palette
            self.palette = [(i * 17, i * 17, i * 17) for i in range(16)]


@dataclass
class ControlSequence:
    """Display parameters collected from an SPU's control sequence chain."""

    x1: int = 0
    y1: int = 0
    x2: int = -1
    y2: int = -1
    palette: tuple[int, int, int, int] = (0, 1, 2, 3)
    alpha: tuple[int, int, int, int] = (15, 15, 15, 0)
    top_field_offset: int | None = None
    bottom_field_offset: int | None = None
    forced: bool = False
    start_delay: float = 0.0  # seconds
    stop_delay: float | None = None  # seconds, None if no stop command


class VobSubParser(SubtitleImageParser):
    """Parses VobSub .idx and .sub files into SubtitleEvent records."""

    def __init__(self, file_path: str | Path, stream_index: int | None = None):
        """
        Initialize VobSub parser.

        Args:
            file_path: Path to the .idx or .sub file; the other one must sit next to it
            stream_index: Subtitle stream to decode. None picks the first one in the index.
        """
        file_path = Path(file_path)
        self.idx_path = file_path.with_suffix(".idx")
        self.sub_path = file_path.with_suffix(".sub")
        self.stream_index = stream_index

    @classmethod
    def can_parse(cls, file_path: Path) -> bool:
        """Check if file is one half of a VobSub pair."""
        suffix = file_path.suffix.lower()
        if suffix == ".idx":
            return file_path.with_suffix(".sub").exists()
        elif suffix == ".sub":
            return file_path.with_suffix(".idx").exists()
        return False

    def parse(self) -> ParseResult:
        """
        Parse VobSub files and extract all subtitle events.

        Malformed packets are logged and skipped. Missing or unreadable files
        raise SubtitleReadError.
        """
        if not self.idx_path.exists():
            raise SubtitleReadError(f"IDX file not found: {self.idx_path}")
        if not self.sub_path.exists():
            raise SubtitleReadError(f"SUB file not found: {self.sub_path}")

        try:
            idx_text = self.idx_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SubtitleReadError(f"Could not read {self.idx_path}: {e}") from e

        header, entries = self._parse_idx(idx_text)
        if entries and self.stream_index is None:
            self.stream_index = entries[0].stream_index
        entries = [e for e in entries if e.stream_index == self.stream_index]

        result = ParseResult(
            palette=header.palette,
            format_info={
                "format": "VobSub",
                "frame_size": (header.size_x, header.size_y),
                "language": header.language,
                "subtitle_count": len(entries),
            },
        )

        if not entries:
            result.warnings.append("No subtitle entries found in IDX file")
            logger.warning("No subtitle entries found in %s", self.idx_path.name)
            return result

        try:
            with open(self.sub_path, "rb") as sub_file:
                for i, entry in enumerate(entries):
                    next_entry = entries[i + 1] if i + 1 < len(entries) else None
                    try:
                        result.subtitles.append(
                            self._parse_subtitle(sub_file, entry, next_entry)
                        )
                    except (MalformedSubtitleError, IndexError, struct.error) as e:
                        message = f"unable to read subtitle {i}: {e}"
                        result.warnings.append(message)
                        logger.warning(
                            "warning: %s. (This can usually be safely ignored.)", message
                        )
        except OSError as e:
            raise SubtitleReadError(f"Could not read {self.sub_path}: {e}") from e

        logger.info(
            "Decoded %d of %d subtitle packets from %s",
            len(result.subtitles),
            len(entries),
            self.sub_path.name,
        )
        return result

    def _parse_idx(self, content: str) -> tuple[VobSubHeader, list[IdxEntry]]:
        """
        Parse the .idx index file.

        Returns:
            Tuple of (header info, list of subtitle entries)
        """
        header = VobSubHeader()
        entries: list[IdxEntry] = []
        stream_index = 0

        for line in content.splitlines():
            line = line.strip()

            if line.startswith("size:"):
                match = re.match(r"size:\s*(\d+)x(\d+)", line)
                if match:
                    header.size_x = int(match.group(1))
                    header.size_y = int(match.group(2))

            elif line.startswith("palette:"):
                colors = re.findall(r"[0-9a-fA-F]{6}", line[8:])
                palette = []
                for color_hex in colors[:16]:
                    rgb = int(color_hex, 16)
                    palette.append(((rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF))
                if len(palette) < 16:
                    logger.warning(
                        "IDX palette has %d entries, padding to 16 with gray", len(palette)
                    )
                while len(palette) < 16:
                    palette.append((128, 128, 128))
                header.palette = palette

            elif line.startswith("id:"):
                # Language ID line: id: en, index: 0
                match = re.match(r"id:\s*(\w*),\s*index:\s*(\d+)", line)
                if match:
                    if not entries:
                        header.language = match.group(1) or header.language
                    stream_index = int(match.group(2))

            elif line.startswith("timestamp:"):
                # Timestamp line: timestamp: 00:00:01:234, filepos: 000000000
                match = re.match(
                    r"timestamp:\s*(\d+):(\d+):(\d+):(\d+),\s*filepos:\s*([0-9a-fA-F]+)",
                    line,
                )
                if match:
                    hours, minutes, seconds, millis = (int(match.group(n)) for n in range(1, 5))
                    timestamp_ms = (hours * 3600 + minutes * 60 + seconds) * 1000 + millis
                    entries.append(
                        IdxEntry(timestamp_ms, int(match.group(5), 16), stream_index)
                    )

        return header, entries

    def _parse_subtitle(
        self, sub_file: BinaryIO, entry: IdxEntry, next_entry: IdxEntry | None
    ) -> SubtitleEvent:
        """Read, decode and time a single SPU."""
        sub_file.seek(entry.file_position)
        spu = self._read_spu(sub_file, 0x20 + entry.stream_index)

        if len(spu) < 4:
            raise MalformedSubtitleError("subtitle packet is truncated")

        ctrl_offset = struct.unpack(">H", spu[2:4])[0]
        ctrl = self._parse_control_sequence(spu, ctrl_offset)

        width = ctrl.x2 - ctrl.x1 + 1
        height = ctrl.y2 - ctrl.y1 + 1
        if width <= 0 or height <= 0:
            raise MalformedSubtitleError(f"invalid subtitle size {width}x{height}")
        if ctrl.top_field_offset is None or ctrl.bottom_field_offset is None:
            raise MalformedSubtitleError("no pixel data offsets in control sequence")

        raw_image = np.zeros((height, width), dtype=np.uint8)
        self._decode_rle_field(spu, ctrl.top_field_offset, ctrl_offset, raw_image, 0)
        self._decode_rle_field(spu, ctrl.bottom_field_offset, ctrl_offset, raw_image, 1)

        base = entry.timestamp_ms / 1000.0
        start_time = base + ctrl.start_delay
        if ctrl.stop_delay is not None:
            end_time = base + ctrl.stop_delay
        elif next_entry is not None:
            end_time = next_entry.timestamp_ms / 1000.0
            logger.debug("Subtitle at %dms: no stop command, using next start", entry.timestamp_ms)
        else:
            end_time = start_time + DEFAULT_DURATION
            logger.debug("Subtitle at %dms: no stop command, using default", entry.timestamp_ms)

        return SubtitleEvent(
            start_time=start_time,
            end_time=end_time,
            force=ctrl.forced,
            x=ctrl.x1,
            y=ctrl.y1,
            width=width,
            height=height,
            raw_image=raw_image,
            palette=ctrl.palette,
            alpha=ctrl.alpha,
        )

    def _read_spu(self, f: BinaryIO, substream_id: int) -> bytes:
        """
        Read MPEG-2 PES packets until one complete SPU has been collected.

        VobSub uses MPEG-2 Program Stream format with subtitle data in
        private stream 1 (0xBD); the first payload byte is the substream ID.
        The first two bytes of the SPU give its total size.
        """
        data = bytearray()
        spu_size = None
        bytes_read = 0

        while bytes_read < MAX_SPU_READ:
            start_code = f.read(4)
            if len(start_code) < 4:
                break

            if start_code == PACK_START:
                # MPEG-2 pack header: 10 more bytes plus stuffing
                pack_header = f.read(10)
                if len(pack_header) < 10:
                    break
                stuffing = pack_header[9] & 0x07
                if stuffing:
                    f.read(stuffing)
                bytes_read += 14 + stuffing
                continue

            if start_code[:3] != b"\x00\x00\x01":
                break

            stream_id = start_code[3]
            if stream_id == PROGRAM_END:
                break

            length_bytes = f.read(2)
            if len(length_bytes) < 2:
                break
            packet_length = struct.unpack(">H", length_bytes)[0]
            packet_data = f.read(packet_length)
            bytes_read += 6 + len(packet_data)
            if len(packet_data) < packet_length:
                break

            if stream_id != PRIVATE_STREAM_1 or len(packet_data) < 3:
                continue

            # Skip PES header extension
            payload_start = 3 + packet_data[2]
            if payload_start >= len(packet_data) or packet_data[payload_start] != substream_id:
                continue

            data.extend(packet_data[payload_start + 1 :])
            if spu_size is None and len(data) >= 2:
                spu_size = struct.unpack(">H", data[0:2])[0]
            if spu_size is not None and len(data) >= spu_size:
                return bytes(data[:spu_size])

        if spu_size is None or len(data) < spu_size:
            raise MalformedSubtitleError(
                f"incomplete subtitle packet ({len(data)} of {spu_size or '?'} bytes)"
            )
        return bytes(data)

    @staticmethod
    def _parse_control_sequence(spu: bytes, offset: int) -> ControlSequence:
        """
        Walk the SP_DCSQ chain starting at offset.

        SP_DCSQ format (from DVD spec):
            - 2 bytes: SP_DCSQ_STM (delay in 90KHz/1024 ticks)
            - 2 bytes: pointer to next SP_DCSQ (points to itself on the last one)
            - commands until 0xFF
        """
        ctrl = ControlSequence()
        seen = set()

        while offset not in seen:
            seen.add(offset)
            if offset + 4 > len(spu):
                raise MalformedSubtitleError(f"control sequence at {offset} out of range")

            delay = struct.unpack(">H", spu[offset : offset + 2])[0] / TICKS_PER_SECOND
            next_offset = struct.unpack(">H", spu[offset + 2 : offset + 4])[0]
            pos = offset + 4

            while True:
                cmd = spu[pos]
                pos += 1

                if cmd == 0x00:  # Forced display
                    ctrl.forced = True
                elif cmd == 0x01:  # Start display
                    ctrl.start_delay = delay
                elif cmd == 0x02:  # Stop display
                    ctrl.stop_delay = delay
                elif cmd == 0x03:  # Palette, 4 nibbles, slot 3 first
                    b1, b2 = spu[pos], spu[pos + 1]
                    ctrl.palette = (b1 >> 4, b1 & 0x0F, b2 >> 4, b2 & 0x0F)
                    pos += 2
                elif cmd == 0x04:  # Alpha, same nibble order as palette
                    b1, b2 = spu[pos], spu[pos + 1]
                    ctrl.alpha = (b1 >> 4, b1 & 0x0F, b2 >> 4, b2 & 0x0F)
                    pos += 2
                elif cmd == 0x05:  # Coordinates, 4 x 12 bits
                    area = spu[pos : pos + 6]
                    if len(area) < 6:
                        raise MalformedSubtitleError("truncated coordinates command")
                    ctrl.x1 = (area[0] << 4) | (area[1] >> 4)
                    ctrl.x2 = ((area[1] & 0x0F) << 8) | area[2]
                    ctrl.y1 = (area[3] << 4) | (area[4] >> 4)
                    ctrl.y2 = ((area[4] & 0x0F) << 8) | area[5]
                    pos += 6
                elif cmd == 0x06:  # RLE offsets (top and bottom fields)
                    ctrl.top_field_offset, ctrl.bottom_field_offset = struct.unpack(
                        ">HH", spu[pos : pos + 4]
                    )
                    pos += 4
                elif cmd == 0xFF:  # End of control sequence
                    break
                else:
                    raise MalformedSubtitleError(f"unknown control command 0x{cmd:02x}")

            offset = next_offset

        return ctrl

    @staticmethod
    def _decode_rle_field(
        spu: bytes, offset: int, end: int, image: np.ndarray, start_line: int
    ) -> None:
        """
        Decode one interlaced field into image.

        VobSub images are interlaced like old TV broadcasts:
        - Top field: even lines (0, 2, 4, 6...)
        - Bottom field: odd lines (1, 3, 5, 7...)

        Each line starts on a byte boundary.
        """
        height, width = image.shape
        nibble = offset * 2
        nibble_end = min(end, len(spu)) * 2

        def next_nibble() -> int:
            nonlocal nibble
            if nibble >= nibble_end:
                raise MalformedSubtitleError("RLE data ran past the end of its field")
            byte = spu[nibble >> 1]
            value = byte >> 4 if nibble % 2 == 0 else byte & 0x0F
            nibble += 1
            return value

        for y in range(start_line, height, 2):
            x = 0
            while x < width:
                code = next_nibble()
                if code < 0x4:
                    code = (code << 4) | next_nibble()
                    if code < 0x10:
                        code = (code << 4) | next_nibble()
                        if code < 0x40:
                            code = (code << 4) | next_nibble()

                run_length = code >> 2
                color = code & 0x03
                if run_length == 0:
                    # Fill the rest of the line
                    run_length = width - x

                run_end = min(x + run_length, width)
                image[y, x:run_end] = color
                x = run_end

            # Byte-align at the end of every line
            if nibble % 2:
                nibble += 1
