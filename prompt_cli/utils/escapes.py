"""VT100 control sequences understood by any standard terminal emulator."""

ESC = "\x1b"
CSI = ESC + "["
BEEP = "\x07"


class Cursor:
    """Cursor positioning and visibility sequences."""

    left = f"{CSI}G"
    hide = f"{CSI}?25l"
    show = f"{CSI}?25h"

    @staticmethod
    def to(x: int, y=None) -> str:
        if y is None:
            return f"{CSI}{x + 1}G"
        return f"{CSI}{y + 1};{x + 1}H"

    @staticmethod
    def move(x: int, y: int) -> str:
        seq = ""
        if x < 0:
            seq += f"{CSI}{-x}D"
        elif x > 0:
            seq += f"{CSI}{x}C"
        if y < 0:
            seq += f"{CSI}{-y}A"
        elif y > 0:
            seq += f"{CSI}{y}B"
        return seq

    @staticmethod
    def up(count: int = 1) -> str:
        return f"{CSI}{count}A"

    @staticmethod
    def down(count: int = 1) -> str:
        return f"{CSI}{count}B"


class Erase:
    """Line erase sequences."""

    line = f"{CSI}2K"

    @staticmethod
    def lines(count: int) -> str:
        """Erase *count* lines upwards, ending at column 0 of the top one."""
        seq = ""
        for i in range(count):
            seq += Erase.line
            if i < count - 1:
                seq += Cursor.up()
        if count:
            seq += Cursor.left
        return seq
