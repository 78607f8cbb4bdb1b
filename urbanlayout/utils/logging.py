import bittensor as bt


class ColoredLogger:
    """ANSI-coloured wrappers around ``bt.logging`` for layout progress messages.

    Pass summaries go out at info (blue), per-block detail at debug (gray),
    recoverable descriptor problems at warning (yellow).
    """

    _COLORS = {
        "blue": "\033[94m",
        "yellow": "\033[93m",
        "red": "\033[91m",
        "green": "\033[92m",
        "gray": "\033[90m",
        "reset": "\033[0m",
    }

    @staticmethod
    def _colored_msg(message: str, color: str) -> str:
        if color not in ColoredLogger._COLORS:
            return message
        return f"{ColoredLogger._COLORS[color]}{message}{ColoredLogger._COLORS['reset']}"

    @staticmethod
    def debug(message: str, color: str = "gray") -> None:
        bt.logging.debug(ColoredLogger._colored_msg(message, color))

    @staticmethod
    def info(message: str, color: str = "blue") -> None:
        bt.logging.info(ColoredLogger._colored_msg(message, color))

    @staticmethod
    def warning(message: str, color: str = "yellow") -> None:
        bt.logging.warning(ColoredLogger._colored_msg(message, color))

    @staticmethod
    def error(message: str, color: str = "red") -> None:
        bt.logging.error(ColoredLogger._colored_msg(message, color))

    @staticmethod
    def success(message: str, color: str = "green") -> None:
        bt.logging.success(ColoredLogger._colored_msg(message, color))
