import struct
from typing import BinaryIO, Iterator, Tuple

# Event Types
EVT_INIT = 0x01
EVT_CARVE = 0x03
EVT_PATH_ADD = 0x04
EVT_SOLVER_SCAN = 0x06
EVT_OPEN = 0x08

MAGIC = b"SPANLOG"

# Payload layout per event type (after the 1 byte type code)
_PAYLOADS = {
    EVT_INIT: ">HH",        # width, height of the freshly initialised grid
    EVT_CARVE: ">HHB",      # row, col, direction
    EVT_OPEN: ">HHB",       # row, col, boundary direction
    EVT_SOLVER_SCAN: ">HH",  # row, col
    EVT_PATH_ADD: ">HH",    # row, col
}


class EventWriter:
    """
    Append-only binary log of what a Maze did: every carve, every boundary
    opening, every cell a solver scanned and the final path.
    Coordinates are packed as unsigned shorts, so grids up to 65535 wide.
    """

    def __init__(self, filename: str):
        self.filename = filename
        self.file: BinaryIO = open(filename, "wb")
        self.file.write(MAGIC)

    def write_header(self, width: int, height: int):
        # Re-emitted on every Grid.initialize(), one log can span several mazes
        self.file.write(struct.pack(">BHH", EVT_INIT, width, height))

    def log_carve(self, row: int, col: int, direction: int):
        self.file.write(struct.pack(">BHHB", EVT_CARVE, row, col, direction))

    def log_open(self, row: int, col: int, direction: int):
        self.file.write(struct.pack(">BHHB", EVT_OPEN, row, col, direction))

    def log_solver_scan(self, row: int, col: int):
        self.file.write(struct.pack(">BHH", EVT_SOLVER_SCAN, row, col))

    def log_path_add(self, row: int, col: int):
        self.file.write(struct.pack(">BHH", EVT_PATH_ADD, row, col))

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class EventReader:
    def __init__(self, filename: str):
        self.filename = filename
        self.file: BinaryIO = open(filename, "rb")
        magic = self.file.read(len(MAGIC))
        if magic != MAGIC:
            self.close()
            raise ValueError(f"{filename} is not a spanmaze event log")

    def stream_events(self) -> Iterator[Tuple[int, Tuple]]:
        while True:
            type_byte = self.file.read(1)
            if not type_byte:
                break

            type_code = type_byte[0]
            fmt = _PAYLOADS.get(type_code)
            if fmt is None:
                raise ValueError(f"Unknown event type 0x{type_code:02x} in {self.filename}")

            size = struct.calcsize(fmt)
            data = self.file.read(size)
            if len(data) != size:
                raise ValueError(f"Truncated event log {self.filename}")
            yield (type_code, struct.unpack(fmt, data))

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
