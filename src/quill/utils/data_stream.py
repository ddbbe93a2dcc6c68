"""Big-endian binary readers and writers for the index and page records"""

import struct
from typing import BinaryIO


class DataOutputStream:
    """Writes fixed-width integers, floats and length-prefixed strings"""

    MAX_STRING_BYTES: int = 0xFFFF

    def __init__(self, stream: BinaryIO):
        self.stream: BinaryIO = stream

    def write_int(self, value: int) -> None:
        _ = self.stream.write(struct.pack(">i", value))

    def write_long(self, value: int) -> None:
        _ = self.stream.write(struct.pack(">q", value))

    def write_double(self, value: float) -> None:
        _ = self.stream.write(struct.pack(">d", value))

    def write_utf(self, value: str) -> None:
        """uint16 byte length followed by the UTF-8 bytes"""
        data = value.encode("utf-8")
        if len(data) > self.MAX_STRING_BYTES:
            raise ValueError(f"String too long to encode ({len(data)} bytes)")
        _ = self.stream.write(struct.pack(">H", len(data)))
        _ = self.stream.write(data)

    def write_bytes(self, data: bytes) -> None:
        """int32 length followed by the raw bytes"""
        self.write_int(len(data))
        _ = self.stream.write(data)


class DataInputStream:
    """Reads back what DataOutputStream wrote, raising EOFError on truncation"""

    def __init__(self, stream: BinaryIO):
        self.stream: BinaryIO = stream

    def _read_exactly(self, size: int) -> bytes:
        data = self.stream.read(size)
        if len(data) != size:
            raise EOFError(f"Unexpected end of stream: wanted {size} bytes, got {len(data)}")
        return data

    def read_int(self) -> int:
        return struct.unpack(">i", self._read_exactly(4))[0]

    def read_long(self) -> int:
        return struct.unpack(">q", self._read_exactly(8))[0]

    def read_double(self) -> float:
        return struct.unpack(">d", self._read_exactly(8))[0]

    def read_utf(self) -> str:
        (length,) = struct.unpack(">H", self._read_exactly(2))
        return self._read_exactly(length).decode("utf-8")

    def read_bytes(self) -> bytes:
        length = self.read_int()
        if length < 0:
            raise ValueError(f"Negative block length: {length}")
        return self._read_exactly(length)
