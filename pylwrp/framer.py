import logging

BLOCK_BEGIN = "BEGIN"
BLOCK_END = "END"

# Inbound text is Latin-1, every byte decodes
ENCODING = "latin-1"

# An unfinished block this long is most likely a lost END line
PENDING_LINES_WARNING = 10000


class BlockFramer:
    """Reassemble received data into response units.

    A response unit is either the lines between a ``BEGIN`` and ``END`` line,
    or a single line sent outside of a block. TCP may split or combine the
    device's writes, so incomplete lines and unfinished blocks are kept until
    the rest arrives.
    """

    def __init__(self):
        self._logger = logging.getLogger(__name__)
        self._partial_line: str = ""
        self._received_lines: list[str] = []
        self._pending_warned = False

    @property
    def pending_lines(self) -> list[str]:
        """Complete lines that are not part of a finished unit yet."""
        return list(self._received_lines)

    def reset(self):
        self._partial_line = ""
        self._received_lines.clear()
        self._pending_warned = False

    def feed(self, data: bytes) -> list[list[str]]:
        """Add received bytes and return the response units they complete."""
        text = self._partial_line + data.decode(ENCODING)
        lines = text.split("\n")
        # Whatever follows the last line break is an incomplete line
        self._partial_line = lines.pop()

        for line in lines:
            line = line.rstrip("\r")
            if line == "":
                continue
            self._logger.debug(f" > received line: {line}")
            self._received_lines.append(line)

        return self._take_units()

    def _take_units(self) -> list[list[str]]:
        units: list[list[str]] = []
        block: list[str] = []
        in_block = False
        processed_until = -1

        for index, line in enumerate(self._received_lines):
            if line == BLOCK_BEGIN:
                in_block = True
                continue

            if line == BLOCK_END:
                if block:
                    units.append(block)
                else:
                    self._logger.debug("Empty response block")
                block = []
                in_block = False
                processed_until = index
                continue

            if in_block:
                block.append(line)
            else:
                units.append([line])
                processed_until = index

        # An open block stays buffered until its END arrives
        del self._received_lines[:processed_until + 1]
        self._check_pending()
        return units

    def _check_pending(self):
        pending = len(self._received_lines)
        if pending <= PENDING_LINES_WARNING:
            self._pending_warned = False
        elif not self._pending_warned:
            self._pending_warned = True
            self._logger.warning(f"Response block still open after {pending} lines, END may be missing")
