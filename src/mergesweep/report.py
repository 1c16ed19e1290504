"""Console output: level-tagged log lines, git passthrough and confirmation prompts."""

from typing import Callable, Optional

from rich.console import Console
from rich.text import Text

Confirm = Callable[[str], bool]

LEVEL_STYLES = {
    "INFO": "bold blue",
    "WARN": "bold yellow",
    "ERROR": "bold red",
}

YES_ANSWERS = ("1", "y", "yes")
NO_ANSWERS = ("2", "n", "no")


class Reporter:
    """Writes ``[LEVEL]: message`` lines to a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def log(self, level: str, message: str) -> None:
        """Print ``message`` tagged with ``level``."""
        line = Text.assemble((f"[{level}]", LEVEL_STYLES.get(level, "")), ": ", message)
        self.console.print(line, soft_wrap=True)

    def info(self, message: str) -> None:
        self.log("INFO", message)

    def warn(self, message: str) -> None:
        self.log("WARN", message)

    def error(self, message: str) -> None:
        self.log("ERROR", message)

    def passthrough(self, output: str) -> None:
        """Echo git's own output verbatim."""
        if output:
            self.console.print(output, markup=False, highlight=False, soft_wrap=True)

    def confirm(self, question: str) -> bool:
        """Ask a numbered yes/no question until a valid answer is given."""
        self.console.print(question, markup=False, highlight=False, soft_wrap=True)
        self.console.print("1) Yes")
        self.console.print("2) No")
        while True:
            answer = self.console.input("#? ").strip().lower()
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False
