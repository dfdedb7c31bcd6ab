"""Primitive binary readers and writers."""

from edsio.binary.endian import ByteOrder, EndianReader, EndianWriter, LittleEndianStream

__all__ = ["ByteOrder", "EndianReader", "EndianWriter", "LittleEndianStream"]
